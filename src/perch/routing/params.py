"""Path parameter converters for route segments like ``{id:int}``.

Captured values are handed to controllers as strings; a converter only
decides which segments a parameter accepts.
"""

# regex pattern for each supported converter
CONVERTERS: dict[str, str] = {
    "str": r"[^/]+",
    "int": r"\d+",
    "float": r"\d+(?:\.\d+)?",
    "path": r".+",
}
