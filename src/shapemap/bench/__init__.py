"""Benchmark harness: sample model families and a timing runner."""
