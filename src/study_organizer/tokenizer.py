import re

_SEPARATOR = re.compile(r'[^a-z0-9]+')


# split lowercase text into alphanumeric tokens
def tokenize(text: str) -> list[str]:
    return [t for t in _SEPARATOR.split(text.lower()) if t]


# lowercase name with underscores read as spaces so \b cues still work
def normalise_text(name: str) -> str:
    return name.lower().replace('_', ' ')
