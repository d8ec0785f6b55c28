from .normalize import Job, normalize_title, normalize_company, normalize_term, is_new
from .date_parse import parse_posting_date
from .pagination import PageInfo, paginate, page_window, page_info, total_pages

__all__ = [
    "Job",
    "normalize_title",
    "normalize_company",
    "normalize_term",
    "is_new",
    "parse_posting_date",
    "PageInfo",
    "paginate",
    "page_window",
    "page_info",
    "total_pages",
]
