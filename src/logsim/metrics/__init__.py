"""Publish counters and latency histograms for a simulation run."""
