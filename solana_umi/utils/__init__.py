"""Utility modules for Solana Umi."""
