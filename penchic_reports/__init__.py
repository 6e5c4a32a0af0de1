"""Order reporting engine: periods, statistics, breakdowns and CSV export."""
