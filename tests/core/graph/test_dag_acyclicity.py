# tests/core/graph/test_dag_acyclicity.py
"""
Testes de integridade estrutural do DAG de objetos.

Os testes asseguram que:
- arestas que fechariam um ciclo são rejeitadas com CycleError
- uma aresta rejeitada não altera o grafo
- arestas para identidades desconhecidas são rejeitadas
- arestas duplicadas são idempotentes
- `remove_node` preserva identidade e arestas

Invariantes:
    - O conjunto de arestas é sempre acíclico
    - A ação de um nó nunca é escrita pelo grafo
"""

import pytest

from clusterflow.core.exceptions import CycleError, UnknownNodeError, ValidationError
from clusterflow.core.graph import DAG, ObjectKey


def _key(name: str) -> ObjectKey:
    return ObjectKey("ConfigMap", "default", name)


def _dag(*names: str) -> DAG:
    dag = DAG()
    for name in names:
        dag.add_or_update_node(_key(name), {"kind": "ConfigMap"})
    return dag


def test_edge_closing_cycle_is_rejected_and_graph_unchanged():
    """
    Verifica que A→B→C seguido de C→A levanta CycleError sem alterar arestas.
    """
    dag = _dag("a", "b", "c")
    dag.add_edge(_key("a"), _key("b"))
    dag.add_edge(_key("b"), _key("c"))
    before = sorted(dag.edges())

    with pytest.raises(CycleError):
        dag.add_edge(_key("c"), _key("a"))

    assert sorted(dag.edges()) == before
    assert [k.name for k in dag.topological_order()] == ["a", "b", "c"]


def test_self_edge_is_a_cycle():
    dag = _dag("a")
    with pytest.raises(CycleError):
        dag.add_edge(_key("a"), _key("a"))
    assert dag.edges() == []


def test_cycle_error_is_not_retryable():
    assert issubclass(CycleError, ValidationError)
    assert CycleError.retryable is False


def test_edge_to_unknown_node_raises():
    dag = _dag("a")
    with pytest.raises(UnknownNodeError) as exc:
        dag.add_edge(_key("a"), _key("ghost"))
    assert exc.value.details["missing"] == str(_key("ghost"))
    assert dag.edges() == []


def test_duplicate_edge_is_idempotent():
    dag = _dag("a", "b")
    dag.add_edge(_key("a"), _key("b"))
    dag.add_edge(_key("a"), _key("b"))
    assert dag.edges() == [(_key("a"), _key("b"))]


def test_add_or_update_is_last_writer_wins_and_keeps_action_unset():
    dag = DAG()
    dag.add_or_update_node(_key("a"), {"data": {"v": "1"}}, source="first")
    node = dag.add_or_update_node(_key("a"), {"data": {"v": "2"}}, owner="second")

    assert len(dag) == 1
    assert node.desired == {"data": {"v": "2"}}
    assert node.meta == {"source": "first", "owner": "second"}
    assert node.action is None


def test_remove_node_keeps_edges_and_marks_absent():
    """
    `remove_node` marca ausência (desired = None) sem orfanar arestas;
    um nó inexistente é inserido já ausente.
    """
    dag = _dag("a", "b")
    dag.add_edge(_key("a"), _key("b"))

    dag.remove_node(_key("a"))
    ghost = dag.remove_node(_key("ghost"))

    assert dag.get(_key("a")).absent
    assert ghost.absent and _key("ghost") in dag
    assert dag.successors(_key("a")) == [_key("b")]
    assert dag.predecessors(_key("b")) == [_key("a")]


def test_descendants_and_ancestors_are_transitive():
    dag = _dag("x", "y", "z", "w")
    dag.add_edge(_key("x"), _key("y"))
    dag.add_edge(_key("y"), _key("z"))

    assert dag.descendants(_key("x")) == {_key("y"), _key("z")}
    assert dag.ancestors(_key("z")) == {_key("x"), _key("y")}
    assert dag.descendants(_key("w")) == set()
