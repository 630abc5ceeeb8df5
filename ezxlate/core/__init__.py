__version__ = "1.2.0"

from ezxlate.core.utils.core_utils import *
from ezxlate.core.base_cli import BaseCLI, KeyValuePairArgs
from ezxlate.core.database import Database
from ezxlate.core.capacity import SchemaCapacity, UNAVAILABLE, UNLIMITED_SIZE, MAX_EXTEND_SIZE, SIZE_TIERS
from ezxlate.core.context import Features, ChangeLedger, RequestContext
from ezxlate.core.tree import ErrorCode, TreeNode, Value
from ezxlate.core.field import Field
from ezxlate.core.entity import Entity, Entities, register_entity, entity_class, make_entity
from ezxlate.core.update import UpdateReport, run_update, run_extract
from ezxlate.core.notices import EventSink, LoggingEventSink, AmqpEventSink
from ezxlate.core.ezxlate_binding import EzxlateBinding, EzxlateError
