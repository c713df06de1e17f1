"""Project configuration.

All settings are read once from an environment mapping (``.env`` loaded by the
CLI) into an immutable :class:`Settings` object that is passed to every stage.
Every Airtable column the pipeline reads is a named, overridable entry of one
of the field maps below.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Any

from dotenv import load_dotenv
from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

from .errors import ConfigurationError

DEFAULT_API_URL = "https://api.airtable.com/v0"


def _blank_is_false(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return False
    return value


def _comma_list(value: Any) -> Any:
    if isinstance(value, str):
        return [part.strip().lower() for part in value.split(",") if part.strip()]
    return value


EnvBool = Annotated[bool, BeforeValidator(_blank_is_false)]
LowerList = Annotated[list[str], BeforeValidator(_comma_list)]


class _EnvGroup(BaseModel):
    """A group of settings validated from flat environment variable names."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    @classmethod
    def from_env(cls, env: Mapping[str, str]):
        """Validate the group; malformed values raise ConfigurationError."""
        try:
            return cls.model_validate(dict(env))
        except ValidationError as exc:
            names = [str(error["loc"][0]) for error in exc.errors() if error["loc"]]
            raise ConfigurationError.for_invalid(list(dict.fromkeys(names))) from exc


class AirtableSettings(_EnvGroup):
    """Credentials and rendering options for the Airtable REST API."""
    token: str = Field(default="", alias="AIRTABLE_TOKEN")
    base_id: str = Field(default="", alias="AIRTABLE_BASE_ID")
    api_url: str = Field(default=DEFAULT_API_URL, alias="AIRTABLE_API_URL")
    # Airtable requires both when cellFormat=string
    timezone: str = Field(default="Europe/Copenhagen", alias="AFF_TIMEZONE")
    locale: str = Field(default="da-DK", alias="AFF_LOCALE")
    request_timeout: float = Field(default=30.0, alias="REQUEST_TIMEOUT")


class TableSettings(_EnvGroup):
    """Table and view ids (from the Airtable URL) for each source table."""
    posts_table_id: str = Field(default="", alias="AIRTABLE_POSTS_TABLE_ID")
    posts_view_id: str = Field(default="", alias="AIRTABLE_POSTS_VIEW_ID")
    affiliates_table_id: str = Field(default="", alias="AIRTABLE_AFF_TABLE_ID")
    affiliates_view_id: str = Field(default="", alias="AIRTABLE_AFF_VIEW_ID")
    products_table_id: str = Field(default="", alias="AIRTABLE_PROD_TABLE_ID")
    products_view_id: str = Field(default="", alias="AIRTABLE_PROD_VIEW_ID")


class AffiliateFields(_EnvGroup):
    """Column names in the Affiliate Links table."""
    sku: str = Field(default="Product SKU", alias="AFF_FIELD_SKU")
    url_base: str = Field(default="URL Base", alias="AFF_FIELD_URL_BASE")
    full_url: str = Field(default="Full Affiliate URL", alias="AFF_FIELD_FULL_URL")
    utm_source: str = Field(default="UTM Source", alias="AFF_FIELD_UTM_SOURCE")
    utm_medium: str = Field(default="UTM Medium", alias="AFF_FIELD_UTM_MEDIUM")
    utm_campaign: str = Field(default="UTM Campaign", alias="AFF_FIELD_UTM_CAMPAIGN")
    subid_template: str = Field(default="Subid Template", alias="AFF_FIELD_SUBID_TEMPLATE")
    country: str = Field(default="Country", alias="AFF_FIELD_COUNTRY")


class ProductFields(_EnvGroup):
    """Column names in the optional Products table.

    The configured name is tried first, then common alternatives, so a base
    with slightly different headers still joins without extra configuration.
    """
    sku: str = Field(default="SKU", alias="PROD_FIELD_SKU")
    name: str = Field(default="Name", alias="PROD_FIELD_NAME")
    image: str = Field(default="Image", alias="PROD_FIELD_IMAGE")

    @property
    def sku_candidates(self) -> list[str]:
        return _dedupe([self.sku, "SKU", "Product SKU", "Sku", "Code", "Product Code", "ID"])

    @property
    def name_candidates(self) -> list[str]:
        return _dedupe([self.name, "Name", "Title", "Product Name"])

    @property
    def image_candidates(self) -> list[str]:
        return _dedupe(
            [self.image, "Image", "Images", "Photo", "Photos", "Picture", "Main Image"]
        )


class PostFields(_EnvGroup):
    """Column names in the Posts table.

    ``status`` selects the inclusion mode: when set, rows are filtered by the
    status allow-list; when empty, by ``publish_flag`` and ``publish_at``.
    """
    status: str = Field(default="Status", alias="POSTS_FIELD_STATUS")
    publish_flag: str = Field(default="", alias="POSTS_FIELD_PUBLISH")
    publish_at: str = Field(default="Publish At", alias="POSTS_FIELD_PUBLISH_AT")
    title: str = Field(default="Title", alias="POSTS_FIELD_TITLE")
    slug: str = Field(default="Slug", alias="POSTS_FIELD_SLUG")
    type: str = Field(default="Post Type", alias="POSTS_FIELD_TYPE")
    language: str = Field(default="Language", alias="POSTS_FIELD_LANGUAGE")
    country: str = Field(default="Country", alias="POSTS_FIELD_COUNTRY")
    tags: str = Field(default="Tags", alias="POSTS_FIELD_TAGS")
    excerpt: str = Field(default="Excerpt", alias="POSTS_FIELD_EXCERPT")
    body: str = Field(default="Markdown", alias="POSTS_FIELD_BODY_MD")
    hero: str = Field(default="Hero Image", alias="POSTS_FIELD_HERO")
    skus: str = Field(default="SKUs", alias="POSTS_FIELD_SKUS")

    @property
    def body_candidates(self) -> list[str]:
        return _dedupe([self.body, "Markdown", "Content", "Body"])

    @property
    def excerpt_candidates(self) -> list[str]:
        return _dedupe([self.excerpt, "Description"])


class UTMDefaults(_EnvGroup):
    """Process-wide fallbacks used when neither token nor row sets a value."""
    source: str = Field(default="blog", alias="AFF_DEFAULT_SOURCE")
    medium: str = Field(default="affiliate", alias="AFF_DEFAULT_MEDIUM")
    campaign: str = Field(default="", alias="AFF_DEFAULT_CAMPAIGN")
    country: str = Field(default="", alias="AFF_DEFAULT_COUNTRY")


class StyleDefaults(_EnvGroup):
    """Default text and CSS classes for rendered links, buttons and cards."""
    link_text: str = Field(default="Get it here", alias="AFF_LINK_TEXT")
    button_class: str = Field(default="cta cta-orange", alias="AFF_BUTTON_CLASS")
    button_target: str = Field(default="_blank", alias="AFF_BUTTON_TARGET")
    button_rel: str = Field(default="nofollow sponsored noopener", alias="AFF_BUTTON_REL")
    button_text: str = Field(default="Claim now", alias="AFF_BUTTON_TEXT")
    card_class: str = Field(default="aff-card", alias="AFF_CARD_CLASS")
    card_img_class: str = Field(default="aff-card-img", alias="AFF_CARD_IMG_CLASS")
    card_body_class: str = Field(default="aff-card-body", alias="AFF_CARD_BODY_CLASS")
    card_title_class: str = Field(default="aff-card-title", alias="AFF_CARD_TITLE_CLASS")
    card_cta_class: str = Field(default="cta cta-orange", alias="AFF_CARD_CTA_CLASS")
    # Pixels; empty leaves sizing to CSS
    card_img_width: str = Field(default="", alias="AFF_CARD_IMG_WIDTH")


class PublishingRules(_EnvGroup):
    """Inclusion filter and auto-insertion options for the content sync."""
    allowed_statuses: LowerList = Field(
        default_factory=lambda: ["ready", "scheduled", "publish"],
        alias="POSTS_ALLOWED_STATUSES",
    )
    exclude_future: EnvBool = Field(default=True, alias="POSTS_EXCLUDE_FUTURE")
    auto_insert_tokens: EnvBool = Field(default=True, alias="POSTS_AUTO_INSERT_TOKENS")
    card_text: str = Field(default="See price", alias="POSTS_CARD_TEXT")


class PathSettings(_EnvGroup):
    """Content root and manifest output locations."""
    content_dir: Path = Field(
        default=Path("src/data/blog"),
        validation_alias=AliasChoices("content_dir", "CONTENT_DIR", "AFF_DATA_DIR"),
    )
    injection_manifest: Path = Field(
        default=Path("tmp/affiliate-injection-manifest.json"), alias="AFF_MANIFEST_OUT"
    )
    sync_manifest: Path = Field(
        default=Path("tmp/content-sync-manifest.json"), alias="SYNC_MANIFEST_OUT"
    )


class RuntimeSettings(_EnvGroup):
    """Debugging and CI switches."""
    debug: EnvBool = Field(default=False, alias="AFF_DEBUG")
    debug_sku: str = Field(default="", alias="AFF_DEBUG_SKU")
    ci: EnvBool = Field(default=False, alias="CI")
    verify_empty_links: EnvBool = Field(default=False, alias="AFF_VERIFY_EMPTY_LINKS")


_GROUPS: dict[str, type[_EnvGroup]] = {
    "airtable": AirtableSettings,
    "tables": TableSettings,
    "affiliate_fields": AffiliateFields,
    "product_fields": ProductFields,
    "post_fields": PostFields,
    "utm": UTMDefaults,
    "styles": StyleDefaults,
    "publishing": PublishingRules,
    "paths": PathSettings,
    "runtime": RuntimeSettings,
}


class Settings(BaseModel):
    """Top-level settings passed explicitly to every component."""

    model_config = ConfigDict(frozen=True)

    airtable: AirtableSettings = Field(default_factory=AirtableSettings)
    tables: TableSettings = Field(default_factory=TableSettings)
    affiliate_fields: AffiliateFields = Field(default_factory=AffiliateFields)
    product_fields: ProductFields = Field(default_factory=ProductFields)
    post_fields: PostFields = Field(default_factory=PostFields)
    utm: UTMDefaults = Field(default_factory=UTMDefaults)
    styles: StyleDefaults = Field(default_factory=StyleDefaults)
    publishing: PublishingRules = Field(default_factory=PublishingRules)
    paths: PathSettings = Field(default_factory=PathSettings)
    runtime: RuntimeSettings = Field(default_factory=RuntimeSettings)

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> Settings:
        """Build settings from a flat mapping of environment variables.

        Raises:
            ConfigurationError: One or more values could not be parsed (all
                offending variables are named)
        """
        groups: dict[str, _EnvGroup] = {}
        invalid: list[str] = []
        for name, group in _GROUPS.items():
            try:
                groups[name] = group.from_env(env)
            except ConfigurationError as exc:
                invalid.extend(exc.invalid)
        if invalid:
            raise ConfigurationError.for_invalid(invalid)
        return cls(**groups)

    def with_overrides(
        self,
        content_dir: Path | None = None,
        injection_manifest: Path | None = None,
        sync_manifest: Path | None = None,
        debug: bool | None = None,
        verify_empty_links: bool | None = None,
    ) -> Settings:
        """Return a copy with CLI overrides applied (``None`` keeps the value)."""
        paths = {
            key: value
            for key, value in (
                ("content_dir", content_dir),
                ("injection_manifest", injection_manifest),
                ("sync_manifest", sync_manifest),
            )
            if value is not None
        }
        runtime = {
            key: value
            for key, value in (("debug", debug), ("verify_empty_links", verify_empty_links))
            if value is not None
        }
        return self.model_copy(
            update={
                "paths": self.paths.model_copy(update=paths),
                "runtime": self.runtime.model_copy(update=runtime),
            }
        )

    # --- Pre-flight checks ---

    @property
    def has_airtable_credentials(self) -> bool:
        """True when affiliate injection could reach Airtable."""
        return bool(
            self.airtable.token and self.airtable.base_id and self.tables.affiliates_table_id
        )

    def require_sync(self) -> None:
        """Raise ConfigurationError unless the Posts table can be fetched."""
        self._require(
            AIRTABLE_TOKEN=self.airtable.token,
            AIRTABLE_BASE_ID=self.airtable.base_id,
            AIRTABLE_POSTS_TABLE_ID=self.tables.posts_table_id,
        )

    def require_injection(self) -> None:
        """Raise ConfigurationError unless the Affiliate Links table can be fetched."""
        self._require(
            AIRTABLE_TOKEN=self.airtable.token,
            AIRTABLE_BASE_ID=self.airtable.base_id,
            AIRTABLE_AFF_TABLE_ID=self.tables.affiliates_table_id,
        )

    @staticmethod
    def _require(**values: str) -> None:
        missing = [name for name, value in values.items() if not value]
        if missing:
            raise ConfigurationError.for_missing(missing)


def _dedupe(names: list[str]) -> list[str]:
    seen: list[str] = []
    for name in names:
        if name and name not in seen:
            seen.append(name)
    return seen


def load_settings(env_file: Path | None = None) -> Settings:
    """Load ``.env`` (without overriding real environment) and build Settings."""
    load_dotenv(env_file or Path(".env"))
    return Settings.from_env(os.environ)
