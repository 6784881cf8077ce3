"""
Chainstub: mocking vocabulary and defaults
"""

# Mocking library whose helpers appear unqualified in generated statements.
MOCKING_MODULE: str = "mockito"
CREATE_MOCK: str = "mock"
DEFINE_RETURN: str = "when"
THEN_RETURN: str = "thenReturn"

FALLBACK_MOCK_EXPRESSION: str = f"{CREATE_MOCK}()"
FALLBACK_NAME_WORDS: tuple[str, ...] = ("mocked", "value")
OPTIONAL_WRAPPER: str = "Optional"
OPTIONAL_SUFFIX_WORD: str = "optional"

TEXTUAL_TYPE: str = "str"
UUID_MODULE: str = "uuid"

# Builtin type names accepted as rule types without a module qualifier.
PRIMITIVE_TYPES: frozenset[str] = frozenset(
    {
        "bool",
        "bytearray",
        "bytes",
        "complex",
        "dict",
        "float",
        "frozenset",
        "int",
        "list",
        "set",
        "str",
        "tuple",
    }
)

DEFAULT_RULES: tuple[tuple[str, str], ...] = (
    (TEXTUAL_TYPE, f"str({UUID_MODULE}.uuid4())"),
    ("bool", "False"),
    ("int", "0"),
    ("float", "0.0"),
    ("complex", "0j"),
    ("bytes", 'b""'),
)

NAMING_STYLES: frozenset[str] = frozenset({"snake", "camel"})
DEFAULT_NAMING_STYLE: str = "snake"
DEFAULT_SETTINGS_FILE: str = ".chainstub/mocking.toml"
SETTINGS_DOCUMENT_NAME: str = "chainstub-mocking-settings"
