from __future__ import annotations

from app.utils.notion_records import (
    DEFAULT_FAVICON,
    check_category_page,
    check_config_page,
    check_link_page,
    database_icon_to_favicon,
    extract_file_url,
    to_category,
    to_config_item,
    to_link,
)
from conftest import make_category_page, make_config_page, make_link_page


def test_check_link_page_reports_missing_properties() -> None:
    result = check_link_page(make_link_page("a", drop=("Tags", "Created")))
    assert not result.ok
    assert "Tags" in result.reason and "Created" in result.reason


def test_check_rejects_non_page_objects() -> None:
    assert not check_category_page({"object": "block", "properties": {}}).ok
    assert not check_config_page(None).ok
    assert check_category_page(make_category_page("c", "工具")).ok


def test_to_link_maps_fields() -> None:
    page = make_link_page("a", name="GitHub", tags=["力荐👍"], desc="代码托管", created="2024-02-02T10:00:00.000Z")
    page["properties"]["iconfile"]["files"] = [{"type": "file", "file": {"url": "https://s3.test/icon.png"}}]

    link = to_link(page)

    assert link.name == "GitHub"
    assert link.desc == "代码托管"
    assert link.created == "2024-02-02T10:00:00.000Z"
    assert link.icon == "https://s3.test/icon.png"
    assert link.pinned


def test_to_category_reads_order_and_icon() -> None:
    category = to_category(make_category_page("c1", "工具", order=3, icon="wrench"))
    assert (category.name, category.order, category.icon_name, category.enabled) == ("工具", 3, "wrench", True)


def test_to_config_item_uppercases_key_and_skips_empty() -> None:
    assert to_config_item(make_config_page("site_title", "Hi")) == ("SITE_TITLE", "Hi")
    assert to_config_item(make_config_page("", "x")) is None


def test_extract_file_url_external() -> None:
    prop = {"files": [{"type": "external", "external": {"url": "https://img.test/a.svg"}}]}
    assert extract_file_url(prop) == "https://img.test/a.svg"
    assert extract_file_url({"files": []}) == ""


def test_database_icon_to_favicon_variants() -> None:
    assert database_icon_to_favicon({"icon": {"type": "emoji", "emoji": "🧭"}}).startswith("data:image/svg+xml")
    assert database_icon_to_favicon({"icon": {"type": "file", "file": {"url": "https://f.test/x.png"}}}) == (
        "https://f.test/x.png"
    )
    assert database_icon_to_favicon({"icon": None}) == DEFAULT_FAVICON
