import re

# Shallow strip of anything shaped like an HTML tag, including an unclosed
# one running to the end of the value. Not an HTML parser.
TAG_PATTERN = re.compile(r"</?[^>]+(>|$)")


def strip_tags(value):
    return TAG_PATTERN.sub("", str(value))


def sanitize_fields(fields):
    """Return a copy of ``fields`` with every value coerced to text and tag-like substrings removed."""
    return {key: strip_tags(value) for key, value in fields.items()}
