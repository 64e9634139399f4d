# services/css_rules.py

from __future__ import annotations

import logging
import re
from typing import List, Tuple

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------
# 簡易 CSS スキャナ
# ------------------------------------------------------------------
# "selector { body }" を正規表現で拾うだけの近似実装。
# - @media などの入れ子ルールは中身のルールがトップレベル扱いになる
# - 文字列中の波括弧はうまく扱えない
# 完全な CSS パーサではない。
RULE_PATTERN = re.compile(r"([^{}]+)\{([^{}]*)\}")

CLASS_SELECTOR = re.compile(r"\.([a-zA-Z_-][\w-]*)")
ID_SELECTOR = re.compile(r"#([a-zA-Z_-][\w-]*)")
TAG_SELECTOR = re.compile(r"^([a-z][a-z0-9]*)", re.IGNORECASE)


def collect_stylesheet(soup: BeautifulSoup) -> str:
    """ドキュメント内の <style> の中身を改行区切りで連結する。"""
    chunks: List[str] = []
    for style in soup.find_all("style"):
        chunks.append(style.string or "")
        chunks.append("\n")
    return "".join(chunks)


def scan_rules(css: str) -> List[Tuple[str, str]]:
    """
    (selector, body) のペアを出現順で返す。
    空のルールと @ で始まるルールは除外する。
    """
    rules: List[Tuple[str, str]] = []
    for match in RULE_PATTERN.finditer(css or ""):
        selector = match.group(1).strip()
        body = match.group(2).strip()
        if not selector or not body:
            continue
        if selector.startswith("@"):
            continue
        rules.append((selector, body))
    return rules


def _is_relevant(part: str, element_html: str) -> bool:
    """セレクタの 1 分岐が要素の HTML に関係するかどうか。"""
    for class_name in CLASS_SELECTOR.findall(part):
        if class_name in element_html:
            return True

    for id_name in ID_SELECTOR.findall(part):
        if id_name in element_html:
            return True

    tag_match = TAG_SELECTOR.match(part)
    if tag_match:
        tag = tag_match.group(1).lower()
        if re.search(rf"<{re.escape(tag)}[\s>]", element_html, re.IGNORECASE):
            return True

    return False


def extract_css_for_element(all_css: str, element_html: str) -> str:
    """
    all_css のうち element_html に関係するルールだけを抜き出す。

    カンマ区切りのいずれかの分岐が関係すればルール全体を採用する
    （マッチした分岐だけに絞らない）。出力順はスタイルシート上の順序。
    """
    if not (all_css or "").strip():
        return ""

    rules: List[str] = []
    for selector, body in scan_rules(all_css):
        parts = [p.strip() for p in selector.split(",")]
        if any(_is_relevant(part, element_html) for part in parts):
            rules.append(f"{selector} {{\n  {body}\n}}")

    logger.debug("[css_rules] matched %d rule(s)", len(rules))
    return "\n\n".join(rules)
