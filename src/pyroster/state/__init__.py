"""State layer.

History recording and persistence of the aggregate state. The engine
hands finished states to this layer; nothing here reconciles records.
"""
