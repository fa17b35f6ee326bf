"""
Core business logic: annotations, local fonts and the export pipeline.
"""
