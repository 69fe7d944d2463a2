from __future__ import annotations

from app.schemas.notion import Category, Link
from app.services.link_service import build_navigation, organize_categories, sort_links


def _link(link_id: str, category1: str = "工具", category2: str = "默认", created: str = "", tags=None) -> Link:
    return Link(id=link_id, category1=category1, category2=category2, created=created, tags=tags or [])


def test_sort_links_pinned_before_unpinned() -> None:
    links = [
        _link("a", created="2024-03-01T00:00:00Z"),
        _link("b", created="2022-01-01T00:00:00Z", tags=["力荐👍"]),
        _link("c", created="2024-05-01T00:00:00Z", tags=["力荐👍", "其他"]),
        _link("d", created="2023-01-01T00:00:00Z"),
    ]

    assert [link.id for link in sort_links(links)] == ["c", "b", "a", "d"]


def test_sort_links_does_not_mutate_input() -> None:
    links = [_link("a", created="2020-01-01T00:00:00Z"), _link("b", created="2021-01-01T00:00:00Z")]
    sort_links(links)
    assert [link.id for link in links] == ["a", "b"]


def test_organize_categories_counts_links_and_sub_categories() -> None:
    stats = organize_categories(
        [_link("1", "工具", "在线"), _link("2", "工具", "在线"), _link("3", "工具", "桌面"), _link("4", "学习")]
    )

    assert stats["工具"].count == 3
    assert stats["工具"].sub_categories == {"在线": 2, "桌面": 1}
    assert stats["学习"].count == 1


def test_build_navigation_filters_links_and_empty_categories() -> None:
    categories = [
        Category(id="c1", name="工具", order=1),
        Category(id="c2", name="空分类", order=2),
    ]
    links = [
        _link("1", "工具", "Dev Tools"),
        _link("2", "已禁用", "x"),
        _link("3", "工具", "在线"),
        _link("4", "工具", "Dev Tools"),
    ]

    navigation = build_navigation(categories, links, {"SITE_TITLE": "T"})

    assert [c.name for c in navigation.categories] == ["工具"]
    assert [s.name for s in navigation.categories[0].sub_categories] == ["Dev Tools", "在线"]
    assert navigation.categories[0].sub_categories[0].id == "dev-tools"
    assert [link.id for link in navigation.links] == ["1", "3", "4"]
    assert navigation.enabled_categories == ["工具", "空分类"]


def test_navigation_dump_uses_camel_case_aliases() -> None:
    navigation = build_navigation([Category(id="c1", name="工具")], [_link("1")], {})
    data = navigation.model_dump(by_alias=True)

    assert "enabledCategories" in data
    assert "subCategories" in data["categories"][0]
