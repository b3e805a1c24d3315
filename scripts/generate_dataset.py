"""
Sales Warehouse Dataset Generator

Writes fact_sales, dim_customers and dim_products to data/gold.

Usage:
    python scripts/generate_dataset.py --orders 50000 --format parquet
"""

from sales_analytics.config.logging import configure_logging
from sales_analytics.data.generators import main

if __name__ == "__main__":
    configure_logging(log_format="text")
    main()
