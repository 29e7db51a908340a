from rich.pretty import pprint

from scopeline import *

__prog__ = "scopeline-demo"

parser = CommandLineParser(__prog__, colorful=True, fancy=True)


@parser.scoped_action(name="scoped-action")
def scoped(namespace):
    pprint(namespace.string_map())


@scoped.define_parameters
def _(provider):
    provider.define_flag_parameter("--scoping", group=SCOPING_GROUP)


@scoped.define_scoped_parameters
def _(provider, namespace):
    provider.define_string_parameter("--arg", "-a", scope="scope1", argument_name="ARG")
    provider.define_string_parameter("--arg", "-a", scope="scope2", argument_name="ARG")
    provider.define_string_parameter("--non-conflicting-arg", "-a", scope="scope", argument_name="ARG")


parser.add_action(scoped)


if __name__ == '__main__':
    parser.execute()
