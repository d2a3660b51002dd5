from .insert import InsertOutcome, InsertSummary, batch_insert, insert_element

__all__ = [
    "InsertOutcome",
    "InsertSummary",
    "batch_insert",
    "insert_element",
]
