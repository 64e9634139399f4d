# models/component_models.py

from __future__ import annotations

from typing import Dict, Literal

from pydantic import BaseModel, Field

# -----------------------------------------
# コンポーネント種別
# -----------------------------------------
ComponentType = Literal[
    "header",
    "hero",
    "features",
    "pricing",
    "testimonials",
    "footer",
    "cta",
    "nav",
    "form",
    "gallery",
    "other",
]

# 名前生成に使う表示ラベル
COMPONENT_TYPE_LABELS: Dict[str, str] = {
    "header": "Header",
    "hero": "Hero Section",
    "features": "Features Section",
    "pricing": "Pricing Section",
    "testimonials": "Testimonials",
    "footer": "Footer",
    "cta": "Call to Action",
    "nav": "Navigation",
    "form": "Form Section",
    "gallery": "Gallery",
    "other": "Section",
}


class ExtractedComponent(BaseModel):
    """ページから切り出した再利用可能なコンポーネント。

    Attributes:
        id (str): 一意な ID（呼び出しごとにランダム）。
        name (str): "Hero Section 1" などの表示名。
        html (str): 要素の outerHTML。
        css (str): 要素に関連する CSS ルール。
        type (ComponentType): 種別。
        description (str): 構造の要約（" | " 区切り）。
    """

    id: str
    name: str
    html: str
    css: str = ""
    type: ComponentType = "other"
    description: str = Field("", description="構造の要約")

    def to_snippet(self) -> str:
        """コピー用のマークアップ（CSS があれば <style> を先頭に付ける）。"""
        if self.css:
            return f"<style>\n{self.css}\n</style>\n{self.html}"
        return self.html
