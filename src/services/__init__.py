"""
Services layer — everything around the routing core.

Sub-packages:
  chat_service     — Qdrant-backed department retriever
  ingest_service   — Department document loading, chunking, seeding
  evaluation       — LLM answer-quality grading
  routing_service  — Sample queries and route-result rendering
"""
