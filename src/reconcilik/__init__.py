"""reconcilik - Desired-state reconciliation against a multi-tenant REST platform."""

from . import resources as resources
from .client import ApiVersion as ApiVersion
from .client import Client as Client
from .client import Response as Response
from .config import ClientConfig as ClientConfig
from .context import Context as Context
from .engine import Operation as Operation
from .engine import OperationResult as OperationResult
from .engine import Reconciler as Reconciler
from .errors import ApiError as ApiError
from .errors import ClassifiedError as ClassifiedError
from .errors import ErrorKind as ErrorKind
from .errors import ReconcilikError as ReconcilikError
from .errors import TransportFailure as TransportFailure
from .errors import classify as classify
from .ops import Absent as Absent
from .ops import Binding as Binding
from .ops import Ensure as Ensure
from .ops import Phase as Phase
from .ops import Present as Present
from .query import Filter as Filter
from .query import ListEnvelope as ListEnvelope
from .query import ListReader as ListReader
from .query import Operator as Operator
from .query import QuerySpec as QuerySpec
from .query import Sort as Sort
from .query import SortDirection as SortDirection
from .resource import Resource as Resource
from .resource import resource as resource
from .state import DesiredState as DesiredState
from .state import WireObject as WireObject
