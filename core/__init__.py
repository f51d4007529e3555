"""Core processing modules package.

- decomposition: text extraction and paragraph chunking
- agents: model-backed analyzers (documents, threats, voice assistant)
- aggregation: merge of per-chunk analyses
- pipeline: background processing and request services
- storage: repositories and uploaded-file storage
- client: Python client (HTTP, upload state machine, polling)
- llm_client: model calls with retries
- cost_tracker: token, latency and cost logging
"""
