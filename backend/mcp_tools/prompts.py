"""
Built-in prompt templates for common Hazelcast workflows.
"""

from typing import Optional

DEFAULT_PROMPT_TOP_K = 5


def cache_lookup(map_name: str, key: str) -> str:
    """Look up a key in a Hazelcast Map cache and explain whether it was a hit or miss."""
    return f"""I need to look up a value in a Hazelcast cache. Please follow these steps:

1. Use the `map_contains_key` tool to check if key '{key}' exists in map '{map_name}'
2. If the key exists (CACHE HIT):
   - Use `map_get` to retrieve the value
   - Display the value in a readable format
   - Explain that this was a cache hit
3. If the key does not exist (CACHE MISS):
   - Explain that this was a cache miss
   - Suggest checking if the map name is correct using the `hazelcast://structures/list` resource
   - Show the total size of the map using `map_size`

Map: {map_name}
Key: {key}
"""


def data_exploration(focus: Optional[str] = None) -> str:
    """Discover available Hazelcast data structures and sample their contents."""
    if focus and focus.strip():
        return f"""I want to explore the Hazelcast data structure '{focus}'. Please:

1. Use `map_size` to check how many entries it has
2. Use `map_keys` with limit 20 to see a sample of keys
3. Pick 3-5 interesting keys and use `map_get` to show their values
4. Summarize the data structure: what kind of data it holds, key patterns, value structure
5. If the values contain structured JSON, describe the schema

Structure to explore: {focus}
"""
    return """I want to explore all data in this Hazelcast cluster. Please:

1. Read the `hazelcast://cluster/info` resource to understand the cluster
2. Read the `hazelcast://structures/list` resource to see all data structures
3. For each IMap found:
   - Show its name and size
   - Use `map_keys` with limit 5 to show sample keys
4. Provide a summary of:
   - How many structures exist and their types
   - Which maps have the most data
   - Suggested next steps for deeper exploration
"""


def vector_search(collection_name: str, query: str, top_k: int = DEFAULT_PROMPT_TOP_K) -> str:
    """Perform a semantic similarity search against a Hazelcast VectorCollection."""
    return f"""I want to perform a semantic similarity search. Please:

1. Note: To perform a vector search, you need a vector embedding of the query.
   The query is: "{query}"
   You would need to generate an embedding using your own model or an embedding API.

2. Once you have the embedding vector, use `vector_search` with:
   - collection_name: '{collection_name}'
   - vector: [the embedding array]
   - top_k: {top_k}

3. For each result returned:
   - Show the document key and value
   - Show the similarity score
   - Explain why this result is relevant to the query

4. Summarize the search results and suggest follow-up queries

Collection: {collection_name}
Query: {query}
TopK: {top_k}
"""


# (name, description, template)
PROMPTS = [
    (
        "cache-lookup",
        "Look up a key in a Hazelcast Map cache and explain whether it was a hit or miss",
        cache_lookup,
    ),
    (
        "data-exploration",
        "Discover available Hazelcast data structures and sample their contents",
        data_exploration,
    ),
    (
        "vector-search",
        "Perform a semantic similarity search against a Hazelcast VectorCollection",
        vector_search,
    ),
]
