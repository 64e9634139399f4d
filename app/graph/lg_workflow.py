# app/graph/lg_workflow.py
from __future__ import annotations

import logging

from app.graph.lg_state import GraphState, create_initial_state
from app.graph import nodes

logger = logging.getLogger(__name__)


def run_workflow(html: str, auto_fix: bool = True) -> GraphState:
    """
    /api/audit 用のシンプルな直列ワークフロー。

    analyzer → fixer → reanalyzer → extractor
    """
    logger.info(
        "[lg_workflow] run_workflow start html_chars=%d auto_fix=%s",
        len(html or ""),
        auto_fix,
    )

    state = create_initial_state(html=html, auto_fix=auto_fix)

    # 1) SEO 解析
    state = nodes.analyzer_node(state)

    # 2) 自動修正（auto_fix=False ならスキップ）
    state = nodes.fixer_node(state)

    # 3) 修正後の再解析
    state = nodes.reanalyzer_node(state)

    # 4) コンポーネント抽出
    state = nodes.extractor_node(state)

    logger.info(
        "[lg_workflow] run_workflow done current_node=%s",
        state.get("current_node"),
    )
    return state
