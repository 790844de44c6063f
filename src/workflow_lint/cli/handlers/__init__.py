from .scan import handle_scan
