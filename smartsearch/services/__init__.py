"""
Services package for SQL Smart Search
Contains the search orchestration, the LLM completion adapter and prompts
"""

__all__ = [
    'smart_search_service',
    'llm_service',
    'prompts',
    'search_metrics',
]
