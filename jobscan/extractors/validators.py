# jobscan/extractors/validators.py
from .candidates import PatternTag
from .patterns import ALL_ZEROS_RE

MIN_LEN = 3
MAX_LABELED_LEN = 10


def is_plausible(tag: PatternTag, value: str) -> bool:
    """Drop matches that cannot be a real value for the field."""
    if len(value) < MIN_LEN:
        return False

    if tag is PatternTag.LEGACY:
        # "12345" is never a plate
        return not value.isdigit()

    if tag in (PatternTag.WIP, PatternTag.JOB):
        if len(value) > MAX_LABELED_LEN:
            return False
        if tag is PatternTag.WIP and ALL_ZEROS_RE.match(value):
            return False

    return True
