"""Prompt templates for the retrieval and data agents."""

from __future__ import annotations

from textwrap import dedent

from agent_gateway.llm.prompts.template import PromptTemplate, RenderedPrompt

KEYWORD_NOT_FOUND = "未找到相關資料"

KEYWORD_TEMPLATE = PromptTemplate(
    name="keyword_extraction_v1",
    system="",
    user=dedent(
        """
        你是一個「主題關鍵詞抽取助手」，專門為檢索系統從使用者查詢中抽取唯一核心主題。

        ## 規則
        1. 只輸出一個主題詞或短語，不要輸出任何解釋、標點符號或引號。
        2. 忽略年份、人物、格式要求等條件，只關注要搜尋「什麼內容」。
        3. 如果查詢是英文或中英混合，先理解含義，再輸出自然、常用的中文主題。
        4. 如果不包含任何主題，則輸出「$not_found」。

        ## 範例
        - 使用者：我想查以前有關房屋政策的質詢紀錄
          你輸出：房屋政策
        - 使用者：Find all questions about minimum wage
          你輸出：最低工資

        現在，請從以下使用者查詢中抽取主題：
        $query
        """
    ),
)

SQL_TEMPLATE = PromptTemplate(
    name="sql_generation_v1",
    system=dedent(
        """
        You translate questions about training records into a single read-only
        SQL SELECT statement. If the question cannot be answered with SQL,
        reply exactly: No SQL Provide
        """
    ),
    user=dedent(
        """
        ## Database schema
        $schema

        ## Question
        $question

        Reply with the SQL statement only, without explanation.
        """
    ),
)


def render_keyword_prompt(query: str) -> RenderedPrompt:
    return KEYWORD_TEMPLATE.render({"query": query, "not_found": KEYWORD_NOT_FOUND})


def render_sql_prompt(question: str, schema: str) -> RenderedPrompt:
    return SQL_TEMPLATE.render({"question": question, "schema": schema or "(schema not provided)"})
