"""
VocabList Backend - Document Keys
===================================

What:  Deterministic record ids and document paths.
How:   Pure functions; no store access. Every service builds paths through
       here so the layout lives in one place.

Layout:
    users/{owner}/lists/{listId}
    users/{owner}/lists/{listId}/items/{wordId}
    users/{owner}/captures/{captureId}
    words/{wordId}
    sharedCodes/{sharedId}

Deterministic ids:
    user list       {slug(name)}_{owner}
    language list   lang_list_{targetLang}_{owner}
    default list    default_favourite_{owner}
    imported list   import_{sourceListId}
"""

import re

from vocablist.exceptions import InvalidArgumentError

WORDS = "words"
SHARED_CODES = "sharedCodes"

DEFAULT_LIST_NAME = "favorite"

_WHITESPACE = re.compile(r"\s+")


def require_segment(value: str, field: str) -> str:
    """
    Validate a caller-supplied id used as a path segment.

    Raises:
        InvalidArgumentError: The value is blank or contains '/'.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(message=f"'{field}' is required", field=field)
    if "/" in value:
        raise InvalidArgumentError(
            message=f"'{field}' must not contain '/'",
            field=field,
            context={"value": value},
        )
    return value


def slugify(name: str) -> str:
    """Lowercase, trim, collapse whitespace runs to '_' and replace '/' with '-'."""
    return _WHITESPACE.sub("_", name.strip().lower()).replace("/", "-")


# ── Deterministic ids ─────────────────────────────────────────────────────

LANGUAGE_LIST_PREFIX = "lang_list_"
DEFAULT_LIST_PREFIX = "default_favourite"
IMPORT_LIST_PREFIX = "import_"

# Ids under these prefixes are only ever minted by the services, never from a name
RESERVED_PREFIXES = (LANGUAGE_LIST_PREFIX, DEFAULT_LIST_PREFIX, IMPORT_LIST_PREFIX)


def list_id_for_name(owner: str, name: str) -> str:
    """
    Raises:
        InvalidArgumentError: Blank name, or a name whose id would land in
            the language / default / imported list namespace.
    """
    slug = slugify(name or "")
    if not slug:
        raise InvalidArgumentError(message="List name is required", field="listName")
    list_id = f"{slug}_{owner}"
    if list_id.startswith(RESERVED_PREFIXES):
        raise InvalidArgumentError(
            message=f"List name '{name.strip()}' is reserved",
            field="listName",
            context={"listId": list_id},
        )
    return list_id


def default_list_id(owner: str) -> str:
    return f"{DEFAULT_LIST_PREFIX}_{owner}"


def language_list_id(owner: str, target_lang: str) -> str:
    return f"{LANGUAGE_LIST_PREFIX}{target_lang}_{owner}"


def import_list_id(source_list_id: str) -> str:
    return f"{IMPORT_LIST_PREFIX}{source_list_id}"


# ── Paths ─────────────────────────────────────────────────────────────────

def lists_collection(owner: str) -> str:
    return f"users/{owner}/lists"


def list_path(owner: str, list_id: str) -> str:
    return f"{lists_collection(owner)}/{list_id}"


def items_collection(owner: str, list_id: str) -> str:
    return f"{list_path(owner, list_id)}/items"


def item_path(owner: str, list_id: str, word_id: str) -> str:
    return f"{items_collection(owner, list_id)}/{word_id}"


def capture_path(owner: str, capture_id: str) -> str:
    return f"users/{owner}/captures/{capture_id}"


def word_path(word_id: str) -> str:
    return f"{WORDS}/{word_id}"


def shared_code_path(shared_id: str) -> str:
    return f"{SHARED_CODES}/{shared_id}"
