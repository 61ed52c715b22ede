# src/clusterflow/__init__.py
"""
ClusterFlow — operador de reconciliação para clusters de banco de dados
multi-componente declarados como recursos customizados.

Princípios centrais:
    - O estado desejado é derivado por um pipeline fixo de Transformers
    - O estado desejado é um DAG explícito de objetos alvo
    - A aplicação é determinística, ordenada e com contenção de falhas
    - Apenas o Driver decide cadência de retry

Arquitetura em alto nível:
    - core.graph        → DAG de objetos alvo
    - core.pipeline     → contrato de Transformer, contexto do ciclo e pipeline
    - core.engine       → diff, planejamento e aplicação contra o object store
    - core.config       → carregamento e merge de configuração
    - model             → Cluster, templates e manifests
    - transformers      → Transformers canônicos e composição do pipeline
    - store             → contrato do object store e implementação em memória
    - controller        → fila por identidade, lock por chave e Driver

Limites explícitos:
    - Não define o formato de wire da plataforma
    - Não oferece CLI nem UI
"""

__version__ = "0.1.0"
