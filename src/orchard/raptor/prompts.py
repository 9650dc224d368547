CLUSTER_SUMMARY_PROMPT = """You write the summary stored on a parent node of a retrieval tree. The node groups {count} documents (or summaries of lower-level groups) whose embeddings were found to be close.

Searches compare queries against this summary to decide whether to look inside the group, so the summary should:
- Name the shared topic first, in one sentence
- Keep the specific entities, figures and terms a query would mention
- Note where the grouped texts disagree or cover distinct subtopics
- Stay under 200 words and read on its own

Respond with the summary text only.

Grouped texts:

{texts}
"""
