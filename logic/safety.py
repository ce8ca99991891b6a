"""Guardrails shared by the query generator prompt and query post-filtering."""

from __future__ import annotations

from typing import List

# Catalog search degrades badly on multi-item queries, so any query naming an
# outfit or a set is rejected regardless of which backend produced it.
BANNED_QUERY_TERMS: List[str] = ["コーデ", "コーディネート", "セットアップ", "セット"]

GUARDRAIL_BULLETS: List[str] = [
    "検索クエリは必ず単品パーツ（シャツ、パンツ、ジャケット、スカート等）の具体的なアイテム名で生成する。",
    "「コーデ」「セット」「セットアップ」などの複数アイテムを表すワードは使用禁止。",
    "複数カテゴリが検出された場合も、それぞれ個別のアイテムとして検索クエリを作成する。",
    "ブランド名や商品URLを創作しない。",
    "回答は指定されたJSON形式のみで返す。",
]


def contains_banned_term(query: str) -> bool:
    return any(term in query for term in BANNED_QUERY_TERMS)


def system_instruction(role_hint: str) -> str:
    """Compose the fixed preamble placed before every generation prompt."""

    boundary_text = "\n".join(f"- {bullet}" for bullet in GUARDRAIL_BULLETS)
    return (
        f"あなたは{role_hint}です。\n"
        "回答する前に次のルールを必ず守ってください:\n"
        f"{boundary_text}"
    )


__all__ = ["BANNED_QUERY_TERMS", "GUARDRAIL_BULLETS", "contains_banned_term", "system_instruction"]
