import copy
import logging
from enum import Enum, Flag, auto


logger = logging.getLogger(__name__)


class Compliant(Flag):
    '''How strictly the data must follow the format: a field with INHERIT
    looks also at the compliant of its father'''
    NONE    = 0
    ENUM    = 1 << 0
    MAGIC   = 1 << 1
    INHERIT = 1 << 2


class Endianess(Enum):
    LITTLE_ENDIAN = auto()
    BIG_ENDIAN    = auto()

    @property
    def prefix(self):
        '''The byte order character used by the struct module'''
        return '<' if self is Endianess.LITTLE_ENDIAN else '>'


class FieldDescriptor(object):
    """Wrapper around field access of a Chunk related class.

    The field declared in the class body works as a template: the first time
    an instance accesses it, a private copy bound to the instance is created."""

    def __init__(self, field_instance: "Field", field_name: str):
        self.field = field_instance
        self.field.name = field_name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self.field

        data = instance.__dict__

        if self.field.name not in data:
            logger.debug("create new field for field named '%s'", self.field.name)
            data[self.field.name] = self.field.create(father=instance)

        return data[self.field.name]

    def __set__(self, instance, value):
        data = instance.__dict__

        # if the value is a field then set as it is
        if isinstance(value, FieldBase):
            value.father = instance
            value.name = self.field.name
            data[self.field.name] = value
        # otherwise delegate to the field
        else:
            self.__get__(instance).value = value


class FieldBase(object):

    def contribute_to_chunk(self, cls, name):
        if name in cls._meta.fields:
            raise AttributeError(f'field {name} is already present in class {cls.__name__}')

        # a field would hide the attribute with the same name (like size or raw)
        for klass in cls.__mro__[1:]:
            if name in vars(klass) and not isinstance(vars(klass)[name], FieldDescriptor):
                raise AttributeError(f'field {name} of class {cls.__name__} shadows {klass.__name__}.{name}')

        setattr(cls, name, FieldDescriptor(self, name))
        cls._meta.fields.append(name)

    def create(self, father):
        instance = copy.deepcopy(self)
        instance.father = father
        return instance


class Meta(object):
    """Class containing metadata about the abstraction"""

    def __init__(self):
        self.fields = []


class MetaChunk(type):

    def __new__(cls, name, bases, attrs):
        '''Fields declared in the class body are removed from the namespace and
        installed as descriptors, remembering the order of declaration.'''
        declared = [(_k, _v) for _k, _v in attrs.items() if isinstance(_v, FieldBase)]

        new_attrs = {_k: _v for _k, _v in attrs.items() if not isinstance(_v, FieldBase)}
        new_cls = super().__new__(cls, name, bases, new_attrs)

        new_cls._meta = Meta()

        # handle inheritance: the descriptors are found via the MRO
        for parent in bases:
            if isinstance(parent, MetaChunk):
                new_cls._meta.fields.extend(parent._meta.fields)

        for field_name, field in declared:
            logger.debug('contribute_to_chunk() for field \'%s\'' % field_name)
            field.contribute_to_chunk(new_cls, field_name)

        return new_cls
