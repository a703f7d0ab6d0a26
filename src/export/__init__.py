"""Stock platform exports."""
