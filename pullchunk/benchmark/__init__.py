from .benchmark import Benchmarker, BenchmarkResult, DEFAULT_CHUNK_SIZES

__all__ = [
    'Benchmarker',
    'BenchmarkResult',
    'DEFAULT_CHUNK_SIZES'
]
