from typing import List, Sequence


def allocate(total: int, weights: Sequence[int]) -> List[int]:
    """
    Split an integer amount of minor units across weights so the parts
    always add back up to ``total``.

    Every part starts as the floor of its exact share. The units lost to
    flooring are then handed out one at a time to the parts with the
    largest fractional remainder; equal remainders go to the earlier
    position. Zero weights never receive anything.
    """
    if any(weight < 0 for weight in weights):
        raise ValueError("Weights cannot be negative")

    weight_sum = sum(weights)
    if weight_sum == 0:
        return [0] * len(weights)

    parts = []
    remainders = []
    for weight in weights:
        share, remainder = divmod(total * weight, weight_sum)
        parts.append(share)
        remainders.append(remainder)

    leftover = total - sum(parts)
    order = sorted(range(len(weights)), key=lambda i: remainders[i], reverse=True)
    for index in order[:leftover]:
        parts[index] += 1

    return parts


def allocate_alternating(total: int, weights: Sequence[int], reverse: bool) -> List[int]:
    """
    Same as ``allocate`` but, when ``reverse`` is set, the weights are
    allocated back to front and the parts flipped back into place. Callers
    alternate ``reverse`` between items so remainder ties do not always
    land on the first contributors.
    """
    if not reverse:
        return allocate(total, weights)
    parts = allocate(total, list(reversed(weights)))
    parts.reverse()
    return parts
