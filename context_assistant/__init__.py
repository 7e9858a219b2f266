"""
Context assistant core package.

This package currently focuses on the uploads subsystem. It exposes
dataclasses for catalog records and extraction outcomes, a type
classifier, per-format text extractors, the JSON-backed file catalog,
and the context assembler that turns enabled files into bounded,
overlapping blocks for a conversational assistant.
"""
