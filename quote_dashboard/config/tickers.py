# Display order of the dashboard table; also the request order.
TICKERS: tuple[str, ...] = ("AAPL", "MSFT", "GOOGL", "AMZN", "NVDA", "META", "TSLA")
