# agents/extractor_agent.py

from __future__ import annotations

import logging
import uuid
from typing import Dict, List, Optional, Set, Tuple

from bs4 import BeautifulSoup, Tag

from models.component_models import COMPONENT_TYPE_LABELS, ExtractedComponent
from services.css_rules import collect_stylesheet, extract_css_for_element
from services.html_parser import parse_document

logger = logging.getLogger(__name__)

# ============================================================
# 固定テーブル
# ============================================================

# Pass 1 で試すセレクタ（優先順）
SEMANTIC_SELECTORS: Tuple[str, ...] = (
    "header",
    "nav",
    "main > section",
    "main > div",
    "body > section",
    "body > div > section",
    "body > div > div",
    "section",
    "footer",
    "main",
    "aside",
)

# class / id に含まれるキーワード → 種別（先にマッチしたものを採用）
CLASS_PATTERNS: Tuple[Tuple[str, str], ...] = (
    ("hero", "hero"),
    ("features", "features"),
    ("feature", "features"),
    ("pricing", "pricing"),
    ("price", "pricing"),
    ("testimonial", "testimonials"),
    ("review", "testimonials"),
    ("cta", "cta"),
    ("call-to-action", "cta"),
    ("gallery", "gallery"),
    ("portfolio", "gallery"),
    ("contact", "form"),
    ("form", "form"),
    ("about", "other"),
    ("footer", "footer"),
    ("header", "header"),
    ("nav", "nav"),
    ("navigation", "nav"),
)

# タグ名だけで種別が決まるもの
TAG_TYPES: Dict[str, str] = {
    "header": "header",
    "nav": "nav",
    "footer": "footer",
    "aside": "other",
}

# div の直下にこれがあればラッパとみなす
WRAPPED_CHILDREN = ("section", "header", "footer", "nav")

MIN_TEXT_LEN = 10


# ============================================================
# ユーティリティ
# ============================================================

def _class_string(element: Tag) -> str:
    classes = element.get("class") or []
    if isinstance(classes, str):
        return classes
    return " ".join(classes)


def _child_elements(element: Tag) -> List[Tag]:
    return element.find_all(True, recursive=False)


def match_class_pattern(value: str) -> Optional[str]:
    """小文字化した文字列に含まれる最初のキーワードの種別を返す。"""
    lowered = value.lower()
    for pattern, component_type in CLASS_PATTERNS:
        if pattern in lowered:
            return component_type
    return None


def detect_component_type(element: Tag) -> str:
    """
    要素の種別を推定する。

    1. header / nav / footer / aside はタグ名で決定
    2. class + id にキーワードが含まれればそれを採用
    3. 中身を見る（form → form, 料金 → pricing, 推薦文 → testimonials）
    4. どれにも当たらなければ other
    """
    tag_type = TAG_TYPES.get(element.name)
    if tag_type:
        return tag_type

    combined = f"{_class_string(element)} {element.get('id') or ''}"
    matched = match_class_pattern(combined)
    if matched:
        return matched

    inner_text = element.get_text().lower()
    if element.find("form") is not None:
        return "form"
    if "pricing" in inner_text or "per month" in inner_text:
        return "pricing"
    if "testimonial" in inner_text or "what our" in inner_text:
        return "testimonials"

    return "other"


def generate_component_name(component_type: str, index: int) -> str:
    return f"{COMPONENT_TYPE_LABELS[component_type]} {index + 1}"


def generate_description(element: Tag) -> str:
    """要素の構造を " | " 区切りで要約する。"""
    child_count = len(_child_elements(element))
    image_count = len(element.find_all("img"))
    has_form = element.find("form") is not None
    link_count = len(element.find_all("a"))
    text_length = len(element.get_text().strip())

    parts: List[str] = [f"<{element.name}> element"]
    if child_count > 0:
        parts.append(f"{child_count} child elements")
    if image_count > 0:
        parts.append(f"{image_count} images")
    if has_form:
        parts.append("contains form")
    if link_count > 0:
        parts.append(f"{link_count} links")
    if text_length > 0:
        parts.append(f"{text_length} chars of text")
    return " | ".join(parts)


# ============================================================
# 抽出ロジック
# ============================================================

class _ExtractionRun:
    """
    1 回の抽出で使う作業領域。
    claimed には要素の id() を入れる（ツリーは呼び出し中だけ生きている）。
    claimed_ancestors は採用済み要素の祖先の id()。
    """

    def __init__(self, soup: BeautifulSoup):
        self.soup = soup
        self.all_css = collect_stylesheet(soup)
        self.claimed: Set[int] = set()
        self.claimed_ancestors: Set[int] = set()
        self.type_counters: Dict[str, int] = {}
        self.components: List[ExtractedComponent] = []

    def is_claimed_or_inside(self, element: Tag) -> bool:
        """既に採用済み、または採用済み要素の子孫なら True（祖先を優先）。"""
        if id(element) in self.claimed:
            return True
        return any(id(parent) in self.claimed for parent in element.parents)

    def wraps_claimed(self, element: Tag) -> bool:
        """採用済み要素を内側に含むなら True（入れ子の抽出を防ぐ）。"""
        return id(element) in self.claimed_ancestors

    def is_available(self, element: Tag) -> bool:
        return not (self.is_claimed_or_inside(element) or self.wraps_claimed(element))

    def accept(self, element: Tag, component_type: str) -> None:
        count = self.type_counters.get(component_type, 0)
        self.type_counters[component_type] = count + 1

        element_html = element.decode(eventual_encoding=None)
        self.components.append(
            ExtractedComponent(
                id=uuid.uuid4().hex[:12],
                name=generate_component_name(component_type, count),
                html=element_html,
                css=extract_css_for_element(self.all_css, element_html),
                type=component_type,
                description=generate_description(element),
            )
        )
        self.claimed.add(id(element))
        self.claimed_ancestors.update(id(parent) for parent in element.parents)


def _should_skip(element: Tag) -> bool:
    """Pass 1 で候補から外す要素かどうか。"""
    # 中身がほとんど無い
    if len(element.get_text().strip()) < MIN_TEXT_LEN and not _child_elements(element):
        return True

    # section を含む main は、細かい section 側に任せる
    if element.name == "main" and element.find("section") is not None:
        return True

    # section / header などを直下に持つ div は単なるラッパ
    if element.name == "div" and any(
        child.name in WRAPPED_CHILDREN for child in _child_elements(element)
    ):
        return True

    return False


def _semantic_pass(run: _ExtractionRun) -> None:
    """Pass 1: セマンティックなタグ・構造セレクタで候補を拾う。"""
    for selector in SEMANTIC_SELECTORS:
        for element in run.soup.select(selector):
            if not run.is_available(element):
                continue
            if _should_skip(element):
                continue
            run.accept(element, detect_component_type(element))


def _class_pattern_pass(run: _ExtractionRun) -> None:
    """Pass 2: class 名のキーワードで div / section を拾う（マッチしないものは無視）。"""
    body = run.soup.body
    if body is None:
        return

    for element in body.select("div[class], section[class]"):
        if not run.is_available(element):
            continue
        component_type = match_class_pattern(_class_string(element))
        if component_type:
            run.accept(element, component_type)


def extract_components(html: Optional[str]) -> List[ExtractedComponent]:
    """
    ページ HTML を再利用可能なコンポーネントに分解する。

    返り値のコンポーネント同士は入れ子にならない（互いに素なサブツリー）。
    空の HTML は空リスト。
    """
    if not html or not html.strip():
        return []

    run = _ExtractionRun(parse_document(html))
    _semantic_pass(run)
    _class_pattern_pass(run)

    logger.info(
        "[extractor] components=%d types=%s",
        len(run.components),
        dict(run.type_counters),
    )
    return run.components


def extract(html: Optional[str]) -> List[ExtractedComponent]:
    """extract_components() のショートカット。"""
    return extract_components(html)
