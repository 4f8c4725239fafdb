"""
Report generation pipeline.

Modules:
    models - Data model: extracted data, report content, requests and artifacts
    orchestrator - Fetch → analyze → chart → assemble → render → persist → notify
    query - Lookup and deletion of stored reports
"""
