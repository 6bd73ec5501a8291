"""
Orchestration of Lokalise and OpenAI calls.
"""
