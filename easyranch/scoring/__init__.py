"""
Attention-priority scoring for the herd
"""

from .attention import (
    AttentionEntry,
    calculate_attention_priority,
    needs_attention,
    rank_attention,
    top_attention
)

__all__ = [
    'AttentionEntry',
    'calculate_attention_priority',
    'needs_attention',
    'rank_attention',
    'top_attention'
]
