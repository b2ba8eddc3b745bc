"""Top-level package for the weekly YNAB spending report.

The primary modules are:

* ``calendar_weeks`` - splits a year into Sunday-anchored, month-clipped weeks
* ``ynab`` - ledger records and the YNAB data source
* ``report`` - turns categories and transactions into the report tables
* ``visual_report`` - renders the report as a standalone HTML page
* ``cli`` - command-line entry point

To produce a report from the command line you can execute:

```bash
python -m ynab_report --config config.json
```
"""

from . import calendar_weeks  # noqa: F401  # re-exported for convenience
from . import report  # noqa: F401  # re-exported for convenience
from . import ynab  # noqa: F401  # re-exported for convenience

__all__ = ["calendar_weeks", "report", "ynab"]
