"""FDA 약품 라벨 기반 RAG 채팅."""
