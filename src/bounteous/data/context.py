# src/bounteous/data/context.py
"""Persistence contexts.

A context is the unit-of-work object handed out by a context factory. It owns
at most one backend, created from its options on first use, and runs every
backend call through the provider's execution strategy.
"""

import logging
import time
import weakref
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from .errors import ConfigurationError, ContextDisposedError
from .observer import DbContextObserver
from .options import DbContextOptions, NamingConvention
from .retry import ExecutionStrategy

# Table names written onto model classes by configure_models, as opposed to
# names the classes declare themselves
_injected_table_names: "weakref.WeakKeyDictionary[Type, str]" = weakref.WeakKeyDictionary()


def declared_table_name(model_class: Type) -> Optional[str]:
    """The ``__table_name__`` a model class declares itself, if any"""
    for cls in model_class.__mro__:
        if '__table_name__' in vars(cls):
            declared = vars(cls)['__table_name__']
            if not isinstance(declared, str) or not declared:
                return None
            if _injected_table_names.get(cls) == declared:
                return None
            return declared
    return None


class ModelBuilder:
    """Collects the model classes a context works with and their table names."""

    def __init__(self, naming_convention: NamingConvention = NamingConvention.AS_IS):
        self.naming_convention = naming_convention
        self._models: Dict[Type, str] = {}

    def entity(self, model_class: Type, table_name: Optional[str] = None) -> 'ModelBuilder':
        """
        Register a model class.

        The table name is, in order: ``table_name``, a string
        ``__table_name__`` declared on the class, or the class name passed
        through the naming convention. Registering a class again replaces
        its earlier entry.
        """
        if table_name is None:
            table_name = declared_table_name(model_class) or self.naming_convention.convert(model_class.__name__)
        self._models[model_class] = table_name
        return self

    def table_name_for(self, model_class: Type) -> str:
        try:
            return self._models[model_class]
        except KeyError:
            raise ConfigurationError(f"Model {model_class.__name__} is not registered with this context")

    @property
    def models(self) -> Dict[Type, str]:
        return dict(self._models)

    def __contains__(self, model_class: Type) -> bool:
        return model_class in self._models

    def __len__(self) -> int:
        return len(self._models)


class DbContext(ABC):
    """
    Base class for application contexts.

    Subclasses declare their model classes in :meth:`register_models`. The
    context is also a context manager; leaving the ``with`` block closes it.
    """

    def __init__(self, options: DbContextOptions, observer: Optional[DbContextObserver] = None):
        if options is None or not options.is_configured:
            raise ConfigurationError("No database provider has been configured for this context")

        self.options = options
        self.observer = observer if observer is not None else DbContextObserver()
        self.logger = logging.getLogger('bounteous.data')
        self._backend = None
        self._execution_strategy: Optional[ExecutionStrategy] = None
        self._models_configured = False
        self._disposed = False

        self.model_builder = ModelBuilder(options.naming_convention)
        self.register_models(self.model_builder)
        self.log(logging.DEBUG, f"Created {type(self).__name__} with {len(self.model_builder)} model(s)")
        self.observer.on_context_created(self)

    @abstractmethod
    def register_models(self, model_builder: ModelBuilder) -> None:
        """Declare the model classes of this context."""
        pass

    def log(self, level: int, msg: str) -> None:
        self.logger.log(level, msg)

    @property
    def provider(self):
        return self.options.provider

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def _check_disposed(self) -> None:
        if self._disposed:
            raise ContextDisposedError(f"{type(self).__name__} has been closed")

    @property
    def backend(self):
        """Backend of this context, created on first access"""
        self._check_disposed()
        if self._backend is None:
            self.log(logging.DEBUG,
                     f"Creating backend for {self.provider.describe(self.options.sensitive_data_logging)}")
            self._backend = self.provider.create_backend()
        return self._backend

    @property
    def execution_strategy(self) -> ExecutionStrategy:
        if self._execution_strategy is None:
            self._execution_strategy = self.provider.create_execution_strategy()
        return self._execution_strategy

    def _describe_statement(self, sql: str, params: Optional[Tuple]) -> str:
        if not params:
            return sql
        if self.options.sensitive_data_logging:
            return f"{sql} with params {params}"
        return f"{sql} with {len(params)} parameter(s)"

    def _on_retry(self, attempt: int, delay: float, error: Exception) -> None:
        self.observer.on_retry(self, attempt, delay, error)

    def _run(self, sql: str, params: Optional[Tuple], operation: Callable[[], Any]) -> Any:
        self._check_disposed()
        start_time = time.perf_counter()
        try:
            result = self.execution_strategy.execute(operation, on_retry=self._on_retry)
        except Exception as e:
            if self.options.detailed_errors:
                self.log(logging.ERROR,
                         f"Failed executing {self._describe_statement(sql, params)}: {type(e).__name__}: {e}")
            else:
                self.log(logging.ERROR, f"{type(e).__name__}: {e}")
            self.observer.on_command_failed(self, sql, e)
            raise
        duration = time.perf_counter() - start_time
        self.observer.on_command_executed(self, sql, duration)
        return result

    def connect(self) -> None:
        """Open the backend connection."""
        self._run('CONNECT', None, lambda: self.backend.connect())
        self.log(logging.INFO, f"Connected using {self.provider.describe(self.options.sensitive_data_logging)}")

    def ping(self, reconnect: bool = True) -> bool:
        return self._run('PING', None, lambda: self.backend.ping(reconnect))

    def execute(self, sql: str, params: Optional[Tuple] = None):
        """Execute a statement and return the backend's query result."""
        self.log(logging.INFO, f"Executing: {self._describe_statement(sql, params)}")
        return self._run(sql, params, lambda: self.backend.execute(sql, params))

    def fetch_one(self, sql: str, params: Optional[Tuple] = None) -> Optional[Dict]:
        self.log(logging.INFO, f"Fetching one: {self._describe_statement(sql, params)}")
        return self._run(sql, params, lambda: self.backend.fetch_one(sql, params))

    def fetch_all(self, sql: str, params: Optional[Tuple] = None) -> List[Dict]:
        self.log(logging.INFO, f"Fetching all: {self._describe_statement(sql, params)}")
        return self._run(sql, params, lambda: self.backend.fetch_all(sql, params))

    def configure_models(self) -> None:
        """
        Bind every registered ActiveRecord model to this context's provider.

        Each model gets the connection config and backend class of the
        options, and its resolved table name when it declares none. Runs
        once per context.
        """
        self._check_disposed()
        if self._models_configured:
            return

        config = self.provider.connection_config
        backend_class = self.provider.backend_class
        for model_class, table_name in self.model_builder.models.items():
            if declared_table_name(model_class) is None:
                model_class.__table_name__ = table_name
                _injected_table_names[model_class] = table_name
            model_class.configure(config, backend_class)
            self.log(logging.DEBUG, f"Configured model {model_class.__name__} on table {table_name}")
        self._models_configured = True

    def close(self) -> None:
        """Disconnect the backend, if one was created. Safe to call twice."""
        if self._disposed:
            return
        if self._backend is not None:
            self._backend.disconnect()
            self._backend = None
        self._disposed = True
        self.log(logging.DEBUG, f"Closed {type(self).__name__}")
        self.observer.on_context_disposed(self)

    def __enter__(self):
        self._check_disposed()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
