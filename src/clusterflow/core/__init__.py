# src/clusterflow/core/__init__.py
"""
Core do ClusterFlow.

Reúne as responsabilidades essenciais do pipeline de reconciliação,
independentes da plataforma concreta:

    - graph    → DAG de objetos alvo (arena + adjacência por identidade)
    - pipeline → contrato de Transformer, TransformContext e composição fail-fast
    - engine   → diff por campos possuídos, planejamento e aplicação ordenada
    - config   → resolução de configuração (defaults empacotados + override local)

Princípios fundamentais:
    - Nenhuma decisão silenciosa: todo erro é atribuído a um nó ou Transformer
    - Transformers não realizam I/O
    - O core nunca dorme nem reexecuta internamente
"""
