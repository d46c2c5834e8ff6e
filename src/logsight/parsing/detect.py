"""Log format detection."""

import logging

from logsight.parsing.formats import GRAMMARS, load_json_object
from logsight.records import FormatVariant


logger = logging.getLogger(__name__)

DETECTION_SAMPLE_SIZE = 10

# Grammars are tried in this order and only the first match per line is credited.
# Apache and nginx share a grammar, so web access lines always land on apache.
GRAMMAR_ORDER = (FormatVariant.APACHE, FormatVariant.NGINX, FormatVariant.SYSLOG)


def sample_lines(lines: list[str], size: int = DETECTION_SAMPLE_SIZE) -> list[str]:
    """First ``size`` non-empty lines."""
    sample = []
    for line in lines:
        if line.strip():
            sample.append(line)
            if len(sample) >= size:
                break
    return sample


def detect_format(lines: list[str]) -> FormatVariant:
    """Guess the format variant of a batch from its first non-empty lines.

    JSON wins when more than half of the sample decodes as JSON objects.
    Otherwise the grammar with strictly the most matching lines wins, and
    ties or no matches fall back to ``custom``.
    """
    sample = sample_lines(lines)
    if not sample:
        return FormatVariant.CUSTOM

    json_count = sum(1 for line in sample if load_json_object(line) is not None)
    if json_count / len(sample) > 0.5:
        return FormatVariant.JSON

    counts = {variant: 0 for variant in GRAMMAR_ORDER}
    for line in sample:
        stripped = line.strip()
        for variant in GRAMMAR_ORDER:
            if GRAMMARS[variant].search(stripped):
                counts[variant] += 1
                break

    best = max(counts.values())
    winners = [variant for variant, count in counts.items() if count == best]
    if best == 0 or len(winners) > 1:
        logger.debug(f'No dominant grammar in sample of {len(sample)} lines: {counts}')
        return FormatVariant.CUSTOM
    return winners[0]
