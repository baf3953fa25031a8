"""
Core Package.

Contains the backend migration logic:
- PHP tokenizer and mutable token stream
- Legacy call matching and rewriting
- Constructor dependency injection
- Processor and Engine
"""
