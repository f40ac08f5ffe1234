"""Financial and cardiovascular risk assessment toolkit.

The scoring core lives in `riskdash.domain` and has no I/O. Services in
`riskdash.services` orchestrate it against the external prediction, narrative
and assistant collaborators; `riskdash.adapters` holds the boundary code.
"""

__version__ = "0.1.0"
