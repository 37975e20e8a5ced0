"""
Core transformation pipeline: semantic resolution, rewriting and the engine.
"""
