import re

_INT = re.compile(r"^[+-]?\d+$")
_FLOAT = re.compile(r"^[+-]?\d+\.\d+$")


def _strip_comment(line: str) -> str:
    quote = None
    for i, ch in enumerate(line):
        if quote:
            if ch == quote:
                quote = None
        elif ch in "\"'":
            quote = ch
        elif ch == "#":
            return line[:i].rstrip()
    return line


def _split_items(body: str) -> list[str]:
    items, current, quote = [], "", None
    for ch in body:
        if quote:
            current += ch
            if ch == quote:
                quote = None
        elif ch in "\"'":
            quote = ch
            current += ch
        elif ch == ",":
            items.append(current.strip())
            current = ""
        else:
            current += ch
    if current.strip():
        items.append(current.strip())
    return items


class TOMLParser:
    """Reads the flat subset of TOML used by imageref.conf files.

    Supports tables (including dotted names), strings, integers, floats,
    booleans and single-line arrays of those.
    """

    def __init__(self):
        self.data = {}

    def parse(self, toml_string):
        """Merge ``toml_string`` into the parsed data.

        Keys repeated within one document are an error; a later document
        overrides keys set by earlier ones.
        """
        current_section, section_name = self.data, ""
        seen = set()
        for lineno, line in enumerate(toml_string.splitlines(), start=1):
            line = _strip_comment(line.strip())
            if not line:
                continue

            if line.startswith("[") and line.endswith("]"):
                section_name = line[1:-1].strip()
                if not section_name:
                    raise ValueError(f"Empty table name on line {lineno}")
                current_section = self._create_section(section_name)
            elif "=" in line:
                key, value = line.split("=", 1)
                key = key.strip().strip("\"'")
                if (section_name, key) in seen:
                    raise ValueError(f"Duplicate key found: {key}")
                seen.add((section_name, key))
                current_section[key] = self._parse_value(value.strip(), lineno)
            else:
                raise ValueError(f"Invalid TOML line {lineno}: {line}")

        return self.data

    def parse_file(self, file_path):
        with open(file_path, "r") as f:
            toml_string = f.read()
        self.parse(toml_string)

        return self.data

    def _create_section(self, section_name):
        section = self.data
        for key in section_name.split("."):
            key = key.strip().strip("\"'")
            section = section.setdefault(key, {})
            if not isinstance(section, dict):
                raise ValueError(f"Table {section_name} redefines a value")

        return section

    def _parse_value(self, value, lineno=0):
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            return value[1:-1]
        if value.startswith("[") and value.endswith("]"):
            return [self._parse_value(v, lineno) for v in _split_items(value[1:-1])]
        if _INT.match(value):
            return int(value)
        if _FLOAT.match(value):
            return float(value)
        if value.lower() in {"true", "false"}:
            return value.lower() == "true"
        raise ValueError(f"Unsupported value type on line {lineno}: {value}")

    def get(self, key, default=None):
        value = self.data
        for k in key.split("."):
            if not isinstance(value, dict):
                return default
            value = value.get(k)
            if value is None:
                return default

        return value
