import pytest

from bbcbasic.environment import Environment
from bbcbasic.errors import (
    ArithmeticFault, RangeFault, StackFault, TypeFault, UndefinedNameFault,
)


def test_sigil_typed_coercion():
    env = Environment()
    env.set_scalar('A%', 3.7)
    assert env.get_scalar('A%') == 3
    env.set_scalar('B%', -3.7)
    assert env.get_scalar('B%') == -3
    env.set_scalar('A', 2)
    assert env.get_scalar('A') == 2.0 and isinstance(env.get_scalar('A'), float)
    env.set_scalar('A$', 'text')
    assert env.get_scalar('A$') == 'text'


def test_names_with_different_sigils_are_distinct():
    env = Environment()
    env.set_scalar('A', 1)
    env.set_scalar('A%', 2)
    env.set_scalar('A$', 'x')
    assert (env.get_scalar('A'), env.get_scalar('A%'), env.get_scalar('A$')) == (1.0, 2, 'x')


def test_assignment_faults():
    env = Environment()
    with pytest.raises(TypeFault) as info:
        env.set_scalar('A$', 1)
    assert info.value.code == 6
    with pytest.raises(TypeFault):
        env.set_scalar('A', 'x')
    with pytest.raises(ArithmeticFault) as info:
        env.set_scalar('A%', 1e10)
    assert info.value.code == 20
    with pytest.raises(RangeFault) as info:
        env.set_scalar('A$', 'x' * 256)
    assert info.value.code == 19


def test_unknown_variable():
    with pytest.raises(UndefinedNameFault) as info:
        Environment().get_scalar('Q')
    assert info.value.code == 26


def test_loop_integer_lookup():
    env = Environment()
    env.set_loop_integer('I', 3)
    assert env.get_scalar('I') == 3 and isinstance(env.get_scalar('I'), int)
    assert env.lookup_numeric('I') == 3
    env.set_scalar('I', 2.5)
    assert env.get_scalar('I') == 2.5
    assert 'I' not in env.loop_integers


def test_arrays():
    env = Environment()
    env.dim_array('A', [2, 3])
    assert env.get_element('A', [2, 3]) == 0.0
    env.set_element('A', [1, 2], 7)
    assert env.get_element('A', [1, 2]) == 7.0
    env.dim_array('N$', [1])
    assert env.get_element('N$', [0]) == ''


def test_array_faults():
    env = Environment()
    env.dim_array('A', [2])
    with pytest.raises(RangeFault) as info:
        env.get_element('A', [3])
    assert info.value.code == 15
    with pytest.raises(RangeFault):
        env.get_element('A', [1, 1])
    with pytest.raises(RangeFault) as info:
        env.dim_array('A', [4])
    assert info.value.code == 10
    with pytest.raises(RangeFault):
        env.dim_array('B', [-1])
    with pytest.raises(UndefinedNameFault) as info:
        env.get_element('C', [0])
    assert info.value.code == 14


def test_local_outside_a_scope():
    with pytest.raises(StackFault) as info:
        Environment().declare_local('X')
    assert info.value.code == 12


def test_local_shadows_and_restores():
    env = Environment()
    env.set_scalar('X', 5)
    env.push_scope()
    env.declare_local('X')
    assert env.get_scalar('X') == 0.0
    env.set_scalar('X', 9)
    env.declare_local('Y$')
    env.set_scalar('Y$', 'inner')
    env.pop_scope()
    assert env.get_scalar('X') == 5.0
    assert not env.has_scalar('Y$')
    assert env.scope_depth == 0


def test_local_restores_loop_integer():
    env = Environment()
    env.set_loop_integer('I', 4)
    env.push_scope()
    env.declare_local('I')
    env.set_scalar('I', 1.5)
    env.pop_scope()
    assert env.get_scalar('I') == 4 and isinstance(env.get_scalar('I'), int)


def test_nested_scopes_unwind_in_order():
    env = Environment()
    env.set_scalar('A', 1)
    env.push_scope()
    env.declare_local('A')
    env.set_scalar('A', 2)
    env.push_scope()
    env.declare_local('A')
    env.set_scalar('A', 3)
    env.pop_scope()
    assert env.get_scalar('A') == 2.0
    env.pop_scope()
    assert env.get_scalar('A') == 1.0
