"""Typed records flowing through the baking pipeline.

CMS rows arrive as loosely-typed mappings; ``ContentRow.from_mapping`` is the
single validation point at the query boundary. Everything downstream works on
the frozen dataclasses defined here. Page models are the renderer-ready output
of the assemblers and carry a ``kind`` discriminator so a template renderer can
dispatch on it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, ClassVar, Mapping, Union

from sitebake.exceptions import DataValidationError

FormattingOptions = dict[str, Union[str, bool]]

_ZERO_DATES = {"", "0000-00-00 00:00:00"}


def _parse_datetime(value: Any, field_name: str) -> datetime | None:
    """Parse a CMS timestamp, treating empty and zero dates as missing."""
    if value is None or isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text in _ZERO_DATES:
        return None
    try:
        return datetime.fromisoformat(text.replace(" ", "T", 1))
    except ValueError as exc:
        raise DataValidationError(
            f"Invalid timestamp in column {field_name}",
            context={"column": field_name, "value": text},
        ) from exc


@dataclass(frozen=True)
class ContentRow:
    """A raw post or page row from the CMS.

    Attributes
    ----------
    id : int
        CMS identifier.
    post_type : str
        ``"post"`` for articles, anything else (``"page"``) for long-form
        entries. Revisions carry their parent's type.
    slug : str
        Human-readable identifier used in URLs.
    title : str
        Post title.
    content : str
        Raw markup body.
    published_at, modified_at : datetime | None
        Publish and last-modified timestamps.
    parent_id : int | None
        Parent post for revisions.
    status : str
        CMS publication status.
    """

    id: int
    post_type: str
    slug: str = ""
    title: str = ""
    content: str = ""
    published_at: datetime | None = None
    modified_at: datetime | None = None
    parent_id: int | None = None
    status: str = "publish"

    @property
    def is_article(self) -> bool:
        return self.post_type == "post"

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "ContentRow":
        """Validate a raw CMS row mapping into a ``ContentRow``.

        Parameters
        ----------
        row : Mapping[str, Any]
            Row with CMS column names (``ID``, ``post_type``, ``post_name``,
            ``post_title``, ``post_content``, ``post_date_gmt``,
            ``post_modified_gmt``, ``post_parent``, ``post_status``).

        Returns
        -------
        ContentRow
            The typed row.

        Raises
        ------
        DataValidationError
            If the identifier or post type is missing or malformed.

        Examples
        --------
        >>> ContentRow.from_mapping({"ID": "7", "post_type": "page"}).id
        7
        """
        raw_id = row.get("ID", row.get("id"))
        try:
            row_id = int(raw_id)
        except (TypeError, ValueError) as exc:
            raise DataValidationError(
                "Content row has no valid ID", context={"ID": raw_id}
            ) from exc
        post_type = str(row.get("post_type") or "").strip()
        if not post_type:
            raise DataValidationError(
                "Content row has no post_type", context={"ID": row_id}
            )
        parent = row.get("post_parent")
        try:
            parent_id = int(parent) if parent not in (None, "", 0, "0") else None
        except (TypeError, ValueError) as exc:
            raise DataValidationError(
                "Content row has an invalid post_parent",
                context={"ID": row_id, "post_parent": parent},
            ) from exc
        return cls(
            id=row_id,
            post_type=post_type,
            slug=str(row.get("post_name") or ""),
            title=str(row.get("post_title") or ""),
            content=str(row.get("post_content") or ""),
            published_at=_parse_datetime(row.get("post_date_gmt"), "post_date_gmt"),
            modified_at=_parse_datetime(
                row.get("post_modified_gmt"), "post_modified_gmt"
            ),
            parent_id=parent_id,
            status=str(row.get("post_status") or "publish"),
        )


@dataclass(frozen=True)
class FullPost:
    """A post with its body and metadata resolved by the CMS."""

    id: int
    slug: str
    title: str
    content: str
    post_type: str = "post"
    date: datetime | None = None
    modified_date: datetime | None = None
    authors: tuple[str, ...] = ()
    excerpt: str = ""
    image_url: str | None = None


@dataclass(frozen=True)
class FormattedPost:
    """A ``FullPost`` whose body has been transformed for the renderer."""

    post: FullPost
    html: str

    @property
    def slug(self) -> str:
        return self.post.slug

    @property
    def title(self) -> str:
        return self.post.title


@dataclass(frozen=True)
class EntryMeta:
    slug: str
    title: str
    excerpt: str = ""
    kpi: str = ""


@dataclass(frozen=True)
class CategoryEntry:
    """A category grouping of long-form entries, used for navigation."""

    name: str
    slug: str
    entries: tuple[EntryMeta, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "slug": self.slug,
            "entries": [
                {
                    "slug": e.slug,
                    "title": e.title,
                    "excerpt": e.excerpt,
                    "kpi": e.kpi,
                }
                for e in self.entries
            ],
        }


@dataclass(frozen=True)
class PostSummary:
    """A listing item for blog and front pages."""

    slug: str
    title: str
    date: datetime | None = None
    authors: tuple[str, ...] = ()
    excerpt: str = ""
    image_url: str | None = None

    def with_image(self, image_url: str) -> "PostSummary":
        return replace(self, image_url=image_url)


@dataclass(frozen=True)
class TagEntry:
    id: int
    name: str
    parent_id: int | None = None


@dataclass(frozen=True)
class ChartIndexItem:
    """One visualization on the charts index with its public tags."""

    id: int
    slug: str
    title: str
    variant_name: str | None = None
    tags: tuple[TagEntry, ...] = ()


@dataclass(frozen=True)
class ExportRecord:
    """Metadata for the current rendered export of one visualization.

    Attributes
    ----------
    slug : str
        Visualization slug the export belongs to.
    version : int
        Version stamp of the chart configuration the export was rendered from.
    svg_url : str
        Public URL of the exported image.
    width, height : int
        Pixel dimensions of the export.
    """

    slug: str
    version: int
    svg_url: str
    width: int
    height: int


@dataclass(frozen=True)
class PageModel:
    """Base class for renderer-ready page models."""

    kind: ClassVar[str] = "page"


@dataclass(frozen=True)
class BlogPostPage(PageModel):
    kind: ClassVar[str] = "blog_post"

    post: FormattedPost
    formatting_options: FormattingOptions = field(default_factory=dict)


@dataclass(frozen=True)
class LongFormPage(PageModel):
    kind: ClassVar[str] = "long_form"

    post: FormattedPost
    formatting_options: FormattingOptions = field(default_factory=dict)
    entries: tuple[CategoryEntry, ...] = ()


@dataclass(frozen=True)
class ChartsIndexPage(PageModel):
    kind: ClassVar[str] = "charts_index"

    chart_items: tuple[ChartIndexItem, ...] = ()


@dataclass(frozen=True)
class BlogIndexPage(PageModel):
    kind: ClassVar[str] = "blog_index"

    posts: tuple[PostSummary, ...] = ()
    page_num: int = 1
    num_pages: int = 0


@dataclass(frozen=True)
class FrontPage(PageModel):
    kind: ClassVar[str] = "front_page"

    entries: tuple[CategoryEntry, ...] = ()
    posts: tuple[PostSummary, ...] = ()
