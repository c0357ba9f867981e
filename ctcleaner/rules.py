"""
Deterministic cleaning rules.

This file exists to keep every literal the cleaner matches on in one place.
"""

OUTPUT_ENCODING = "utf-8"  # no BOM
TABLE_SUFFIX = ".ct"
CLEANED_STEM_SUFFIX = "_Cleaned"
BACKUP_SUFFIX = ".bak"

# Script markers
LUA_COMMENT = "--"
LUA_MULTILINE_OPEN = "[["
LUA_MULTILINE_CLOSE = "]]"
LUA_BLOCK = "{$lua}"
ASM_BLOCK = "{$asm}"
ENABLE_SECTION = "[ENABLE]"
DISABLE_SECTION = "[DISABLE]"

# Table elements
ID_TAG = "ID"
LUA_SCRIPT_TAG = "LuaScript"
ASSEMBLER_SCRIPT_TAG = "AssemblerScript"
SIGNATURE_TAG = "Signature"
STRUCTURES_TAG = "Structures"
USER_DEFINED_SYMBOLS_TAG = "UserdefinedSymbols"

# Elements whose value equals the default Cheat Engine assumes anyway.
# (tag, kind, default)
REDUNDANT_DEFAULTS = (
    ("LastState", "any", None),
    ("Unicode", "int", 0),
    ("CodePage", "int", 0),
    ("ZeroTerminate", "int", 1),
    ("Color", "str", "000000"),
    ("DropDownList", "blank", None),
)
