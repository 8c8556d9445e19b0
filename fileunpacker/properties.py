import logging


logger = logging.getLogger(__name__)


def get_root_from_chunk(instance):
    while instance.father is not None:
        instance = instance.father

    return instance


class Dependency:
    '''This makes the relation between fields possible.

    In practice this class allows to write something like

        class Header(Chunk):
            count   = fields.StructField('H')
            offsets = fields.ArrayField(fields.StructField('I'), n=Dependency('.count'))

    and have the number of elements of the field named 'offsets' read from
    the field named 'count' at unpacking time.

    The syntax for the expression is inspired from module resolution:

     - '.' as first char indicates we refer to a field at the same level (i.e. of the father)
     - otherwise the resolution starts from the root chunk
    '''
    def __init__(self, expression):
        self.expression = expression

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.expression})>'

    def resolve_field(self, instance):
        fields_path = self.expression.split('.')
        # '.count'.split(".") -> ['', 'count']
        # 'header.count'.split(".") -> ['header', 'count']

        if fields_path[0] == '':
            field = instance.father
            fields_path = fields_path[1:]
        else:
            field = get_root_from_chunk(instance)

        if field is None:
            raise AttributeError(f'cannot resolve {self!r}: {instance!r} has no father')

        for component_name in fields_path:
            field = getattr(field, component_name)

        logger.debug(' resolved %r as field %s' % (self, field.__class__.__name__))

        return field

    def resolve(self, instance):
        '''With this method we resolve the attribute with respect to the instance
        passed as argument.'''
        value = self.resolve_field(instance).value

        return value.value if hasattr(value, 'value') else value
