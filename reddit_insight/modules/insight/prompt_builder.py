from __future__ import annotations

from reddit_insight.config import CardinalityCaps, ResearchConfig


# ---------------------------------------------------------------------------
# Grounding pass: gather live context for the query
# ---------------------------------------------------------------------------


def build_grounding_prompt(query: str, research: ResearchConfig) -> str:
    return (
        f'Perform a market research search for "{query}" on site:{research.source_domain}.\n'
        f"Find recent discussions (last {research.recency_months} months).\n"
        f"Identify top {research.subreddit_count} subreddits.\n"
        f"Collect details for {research.thread_count} representative threads.\n"
        f"Goal: Gather data to simulate {research.simulated_post_count} "
        "representative posts."
    )


# ---------------------------------------------------------------------------
# Synthesis pass: structured dataset under fixed cardinality caps
# ---------------------------------------------------------------------------

_POST_SHAPE = (
    '{ "title": "string", "url": "string", "snippet": "string", '
    '"summary_cn": "string", "subreddit": "string", "upvotes": number, '
    '"comments": number, "date": "string", "sentiment": "positive|neutral|negative" }'
)

_SCHEMA_TEMPLATE = """\
{{
  "meta": {{ "fetchedPostCount": {post_count}, "fetchMode": "{fetch_mode}" }},
  "metrics": {{
    "totalPostsGrowth": number,
    "totalPostsVolume": number,
    "activeTrends": number,
    "engagementRate": number,
    "activeUsers": number
  }},
  "subreddits": [
    {{
      "name": "string (e.g. r/Parenting)",
      "memberCount": number,
      "postVolume": number,
      "percentage": number,
      "history": [{{"month": "string", "value": number}}],
      "topTopics": ["string"],
      "brands": ["string"],
      "painPoints": [{{ "subject": "严重程度", "A": number, "fullMark": 25 }}, {{ "subject": "频率", "A": number, "fullMark": 25 }}, {{ "subject": "时效性", "A": number, "fullMark": 25 }}, {{ "subject": "未满足度", "A": number, "fullMark": 25 }}],
      "topPosts": [ {post} ]
    }}
  ],
  "topics": [
    {{
      "title": "string (English)",
      "growth": number,
      "volume": number,
      "sentiment": number,
      "history": [{{"month": "string", "value": number}}],
      "brands": ["string"],
      "painPoints": [
        {{ "id": "string", "title": "string (Chinese)", "severity": number, "frequency": number, "recency": number, "unmetNeed": number, "totalScore": number, "quotes": ["string"] }}
      ],
      "userPersona": {{
        "type": "string",
        "motivation": "string",
        "complaints": "string",
        "scenario": "string",
        "severity": "string",
        "tone": "string"
      }},
      "topPosts": [ {post} ]
    }}
  ],
  "brands": [
    {{
      "name": "string",
      "mentions": number,
      "yoyGrowth": number,
      "sentiment": {{ "pos": number, "neu": number, "neg": number }},
      "topComplaints": ["string"],
      "topPraises": ["string"],
      "examplePosts": [{{ "title": "string", "url": "string" }}]
    }}
  ]
}}"""


def build_synthesis_prompt(
    query: str,
    search_context: str,
    research: ResearchConfig,
    caps: CardinalityCaps,
) -> str:
    """Build the structured-generation prompt.

    The caps bound the response size; oversized replies were the main source
    of upstream failures.
    """
    post_count = research.simulated_post_count
    schema = _SCHEMA_TEMPLATE.format(
        post_count=post_count,
        fetch_mode=research.fetch_mode,
        post=_POST_SHAPE,
    )
    return f"""\
You are a Data Engine. Simulate a dataset of EXACTLY {post_count} Reddit posts regarding "{query}" based on the search context below.

Search Context:
{search_context}

Output strictly valid JSON.

CRITICAL RULES:
1. **Sample Size**: Calculations based on {post_count} posts.
2. **Metrics**: "totalPostsVolume" must be a number (e.g., 2850). "engagementRate" must be a percentage number (e.g., 8.2).
3. **Scores**: pain point "severity", "frequency", "recency" and "unmetNeed" are 0-25 each; "totalScore" is their sum (0-100). Topic "sentiment" is 0-100. Brand sentiment "pos" + "neu" + "neg" = 100.
4. **Language**: Titles/Snippets in English. Summaries/Labels in Simplified Chinese.
5. **Limits (To prevent errors)**:
   - 'topics': Max {caps.topics} items
   - 'subreddits': Max {caps.subreddits} items
   - 'painPoints' inside topics: Max {caps.pain_points_per_topic} items
   - 'topPosts' inside topics: Max {caps.posts_per_topic} items
   - 'brands': Max {caps.brands} items
   - 'examplePosts' inside brands: Max {caps.posts_per_brand} item(s)

Structure:
{schema}
"""
