"""Entry type and contributor role taxonomies with their static lookup tables."""

from enum import Enum
from typing import Optional


# ── Entry Types ──────────────────────────────────────────────────────


class EntryType(str, Enum):
    """Kind of work a citation describes."""

    ARTICLE = "article"
    CHAPTER = "chapter"
    ENTRY = "entry"
    ANTHOS = "anthos"
    REPORT = "report"
    THESIS = "thesis"
    WEB = "web"
    SCENE = "scene"
    ARTWORK = "artwork"
    PATENT = "patent"
    CASE = "case"
    NEWSPAPER = "newspaper"
    LEGISLATION = "legislation"
    MANUSCRIPT = "manuscript"
    TWEET = "tweet"
    MISC = "misc"
    PERIODICAL = "periodical"
    PROCEEDINGS = "proceedings"
    BOOK = "book"
    BLOG = "blog"
    REFERENCE = "reference"
    CONFERENCE = "conference"
    ANTHOLOGY = "anthology"
    REPOSITORY = "repository"
    THREAD = "thread"
    VIDEO = "video"
    AUDIO = "audio"
    EXHIBITION = "exhibition"


# Container type each entry type is conventionally published within.
DEFAULT_PARENTS: dict[EntryType, Optional[EntryType]] = {
    EntryType.ARTICLE: EntryType.PERIODICAL,
    EntryType.CHAPTER: EntryType.BOOK,
    EntryType.ENTRY: EntryType.REFERENCE,
    EntryType.ANTHOS: EntryType.ANTHOLOGY,
    EntryType.REPORT: None,
    EntryType.THESIS: None,
    EntryType.WEB: None,
    EntryType.SCENE: EntryType.VIDEO,
    EntryType.ARTWORK: EntryType.EXHIBITION,
    EntryType.PATENT: None,
    EntryType.CASE: None,
    EntryType.NEWSPAPER: None,
    EntryType.LEGISLATION: EntryType.ANTHOLOGY,
    EntryType.MANUSCRIPT: None,
    EntryType.TWEET: EntryType.THREAD,
    EntryType.MISC: None,
    EntryType.PERIODICAL: None,
    EntryType.PROCEEDINGS: None,
    EntryType.BOOK: None,
    EntryType.BLOG: None,
    EntryType.REFERENCE: None,
    EntryType.CONFERENCE: None,
    EntryType.ANTHOLOGY: None,
    EntryType.REPOSITORY: None,
    EntryType.THREAD: None,
    EntryType.VIDEO: None,
    EntryType.AUDIO: None,
    EntryType.EXHIBITION: None,
}


def default_parent(entry_type: EntryType) -> Optional[EntryType]:
    """Return the default container type for *entry_type*, or None."""
    return DEFAULT_PARENTS[entry_type]


def parse_entry_type(text: str | None) -> Optional[EntryType]:
    """Match free text against entry type values, case-insensitively."""
    if not text:
        return None
    try:
        return EntryType(text.strip().lower())
    except ValueError:
        return None


# ── Roles ────────────────────────────────────────────────────────────


class Role(str, Enum):
    """Function of a non-authorial contributor."""

    TRANSLATOR = "translator"
    AFTERWORD = "afterword"
    FOREWORD = "foreword"
    INTRODUCTION = "introduction"
    ANNOTATOR = "annotator"
    COMMENTATOR = "commentator"
    HOLDER = "holder"
    COMPILER = "compiler"
    FOUNDER = "founder"
    COLLABORATOR = "collaborator"
    ORGANIZER = "organizer"
    CAST_MEMBER = "cast-member"
    COMPOSER = "composer"
    PRODUCER = "producer"
    EXECUTIVE_PRODUCER = "executive-producer"
    WRITER = "writer"
    CINEMATOGRAPHY = "cinematography"
    DIRECTOR = "director"
    ILLUSTRATOR = "illustrator"
    NARRATOR = "narrator"


# Normalized context phrase -> role. Keys are lowercase, single-spaced.
# Includes credit-line phrasing and schema.org property names.
ROLE_PHRASES: dict[str, Role] = {
    # Translator
    "translated by": Role.TRANSLATOR,
    "translation by": Role.TRANSLATOR,
    "translator": Role.TRANSLATOR,
    "trans": Role.TRANSLATOR,
    # Afterword / Foreword / Introduction
    "afterword by": Role.AFTERWORD,
    "afterword": Role.AFTERWORD,
    "foreword by": Role.FOREWORD,
    "foreword": Role.FOREWORD,
    "preface by": Role.FOREWORD,
    "introduction by": Role.INTRODUCTION,
    "introduced by": Role.INTRODUCTION,
    "introduction": Role.INTRODUCTION,
    # Annotator / Commentator
    "annotated by": Role.ANNOTATOR,
    "annotations by": Role.ANNOTATOR,
    "annotator": Role.ANNOTATOR,
    "commentary by": Role.COMMENTATOR,
    "comments by": Role.COMMENTATOR,
    "commentator": Role.COMMENTATOR,
    # Holder
    "assignee": Role.HOLDER,
    "held by": Role.HOLDER,
    "holder": Role.HOLDER,
    "copyright holder": Role.HOLDER,
    # Compiler / Founder
    "compiled by": Role.COMPILER,
    "compiler": Role.COMPILER,
    "founded by": Role.FOUNDER,
    "founder": Role.FOUNDER,
    # Collaborator / Organizer
    "in collaboration with": Role.COLLABORATOR,
    "collaborator": Role.COLLABORATOR,
    "organized by": Role.ORGANIZER,
    "organised by": Role.ORGANIZER,
    "organizer": Role.ORGANIZER,
    # Performance
    "performed by": Role.CAST_MEMBER,
    "starring": Role.CAST_MEMBER,
    "cast": Role.CAST_MEMBER,
    "cast member": Role.CAST_MEMBER,
    "actor": Role.CAST_MEMBER,
    "music by": Role.COMPOSER,
    "composed by": Role.COMPOSER,
    "composer": Role.COMPOSER,
    "produced by": Role.PRODUCER,
    "producer": Role.PRODUCER,
    "executive producer": Role.EXECUTIVE_PRODUCER,
    "executive produced by": Role.EXECUTIVE_PRODUCER,
    "screenplay by": Role.WRITER,
    "written by": Role.WRITER,
    "writer": Role.WRITER,
    "cinematography by": Role.CINEMATOGRAPHY,
    "cinematography": Role.CINEMATOGRAPHY,
    "director of photography": Role.CINEMATOGRAPHY,
    "directed by": Role.DIRECTOR,
    "director": Role.DIRECTOR,
    "illustrated by": Role.ILLUSTRATOR,
    "illustrations by": Role.ILLUSTRATOR,
    "illustrator": Role.ILLUSTRATOR,
    "narrated by": Role.NARRATOR,
    "read by": Role.NARRATOR,
    "narrator": Role.NARRATOR,
}


def parse_role(text: str | None) -> Optional[Role]:
    """Match a serialized role label (e.g. ``cast-member``) to a Role."""
    if not text:
        return None
    try:
        return Role(text.strip().lower())
    except ValueError:
        return None
