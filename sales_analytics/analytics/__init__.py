"""
Exploratory Analytics Module
"""
from .exploration import count_by, date_range_summary, measures_overview, sales_by
from .part_to_whole import category_contribution
from .ranking import top_customers, top_products
from .segmentation import customer_segment_counts, product_cost_ranges, product_segment_counts
from .trends import cumulative_sales, sales_over_time, yearly_product_performance

__all__ = [
    "count_by",
    "date_range_summary",
    "measures_overview",
    "sales_by",
    "category_contribution",
    "top_customers",
    "top_products",
    "customer_segment_counts",
    "product_cost_ranges",
    "product_segment_counts",
    "cumulative_sales",
    "sales_over_time",
    "yearly_product_performance",
]
