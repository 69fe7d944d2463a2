"""
本文件用于定义导航内容的领域模型（由 Notion 原始记录归一化而来）。
主要类:
- `Link`: 单条导航链接
- `Category` / `SubCategory`: 导航分类与派生子分类
- `CategoryStats`: 分类下链接数量统计
- `NavigationData`: 首页渲染所需的完整数据
"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

PIN_TAG = "力荐👍"
DEFAULT_CATEGORY1 = "未分类"
DEFAULT_CATEGORY2 = "默认"

WebsiteConfig = Dict[str, str]


class Link(BaseModel):
    """
    输入:
    - 归一化后的链接字段

    输出:
    - 不可变的链接对象

    作用:
    - 承载一次聚合周期内的链接数据；分类字段在归一化后始终非空
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    created: str = ""
    desc: str = ""
    url: str = "#"
    category1: str = DEFAULT_CATEGORY1
    category2: str = DEFAULT_CATEGORY2
    iconfile: str = ""
    iconlink: str = ""
    tags: List[str] = Field(default_factory=list)

    @property
    def icon(self) -> str:
        return self.iconfile or self.iconlink

    @property
    def pinned(self) -> bool:
        return PIN_TAG in self.tags


class SubCategory(BaseModel):
    id: str
    name: str


class Category(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    icon_name: str = Field("", alias="iconName")
    order: int = 0
    enabled: bool = True
    sub_categories: List[SubCategory] = Field(default_factory=list, alias="subCategories")


class CategoryStats(BaseModel):
    name: str
    count: int = 0
    sub_categories: Dict[str, int] = Field(default_factory=dict, alias="subCategories")

    model_config = ConfigDict(populate_by_name=True)


class NavigationData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    config: WebsiteConfig
    categories: List[Category]
    links: List[Link]
    enabled_categories: List[str] = Field(default_factory=list, alias="enabledCategories")
