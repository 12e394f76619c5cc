from .sequence_aligner import AlignmentResult, SequenceAligner, align_sequences, visualize_alignment

__all__ = ["AlignmentResult", "SequenceAligner", "align_sequences", "visualize_alignment"]
