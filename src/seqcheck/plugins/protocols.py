# src/seqcheck/plugins/protocols.py
"""Plugin protocols defining the contracts a host test framework calls.

These protocols define what methods plugins must implement. They're used
for type checking and registration-time verification, not inheritance:
built-in plugins do not subclass them.

Plugin Types:
- Client: Issues operations against one database node
- Generator: Produces the next operation for a process
- Checker: Judges a completed history
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from seqcheck.contracts import CheckOptions, History, Operation, Verdict


@runtime_checkable
class ClientProtocol(Protocol):
    """Protocol for database clients.

    The host creates one client per process and binds it to a node.

    Lifecycle:
    1. setup(node) - Connect; first client across the run creates the schema
    2. invoke(op) - Called once per operation, strictly sequentially
    3. teardown() - Drop schema, release the connection

    invoke() must run the call through an OperationExecutor, so it always
    returns a completion and only raises for unclassified faults.
    """

    name: str

    def setup(self, node: str) -> None: ...

    def invoke(self, op: "Operation") -> "Operation": ...

    def teardown(self) -> None: ...


@runtime_checkable
class GeneratorProtocol(Protocol):
    """Protocol for workload generators.

    next() returns an invoke record, or None when the generator has nothing
    to offer this process right now (the host asks again later).
    """

    name: str

    def next(self, process: int) -> "Operation | None": ...


@runtime_checkable
class CheckerProtocol(Protocol):
    """Protocol for history checkers.

    check() receives the fully materialized history after the run and must
    not mutate it.
    """

    name: str

    def check(self, history: "History", options: "CheckOptions") -> "Verdict": ...
