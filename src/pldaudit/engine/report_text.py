"""Fixed report copy (pt-BR). Verdict sentences live in the policy pack."""

REPORT_TITLE = "Relatório PLD"

# -- 1. Introduction ----------------------------------------------------------
INTRODUCTION_TITLE = "1- Introdução"
INTRODUCTION_LEGAL_BASIS = (
    "Conforme artigo 62 da Circular BCB nº 3.978, de 23 de janeiro de 2020, as "
    "instituições autorizadas a funcionar pelo Banco Central do Brasil devem avaliar "
    "anualmente a efetividade da política, dos procedimentos e dos controles internos "
    "por elas implementados para a prevenção à lavagem de dinheiro e ao financiamento "
    "do terrorismo."
)
INTRODUCTION_SCOPE = (
    "Este relatório contém o resultado da avaliação dos diversos itens do programa de "
    "PLD/FTP das instituições {institutions}."
)
INTRODUCTION_NAMING = (
    "Para fins de elaboração deste relatório, Instituição será doravante adotado para "
    "designar ambas as instituições."
)
INTRODUCTION_CONTENTS = (
    "Em atendimento ao disposto no § 1º do artigo 62 da Circular BCB nº 3.978/20, este "
    "relatório descreve a metodologia empregada nessa avaliação, os testes aplicados, a "
    "qualificação do avaliador, os itens avaliados e o resultado dessa avaliação "
    "(deficiências identificadas)."
)
INTRODUCTION_AS_OF = "A avaliação considerou o programa de PLD/FTP vigente em {as_of}."

# -- 2. Methodology -----------------------------------------------------------
METHODOLOGY_TITLE = "2- Metodologia de Avaliação"
METHODOLOGY_LEAD = "A metodologia de avaliação consistiu na:"
METHODOLOGY_DOCUMENT_CHECKS = [
    "verificação da existência, formalização, conteúdo, atualização e, quando for o "
    "caso, a divulgação dos documentos exigidos expressamente na Circular BCB nº 3.978/20:",
]
METHODOLOGY_REQUIRED_DOCUMENTS = [
    "Política de PLD/FTP;",
    "Manual de Procedimentos Conheça seu Cliente;",
    "Manual de Procedimentos de Monitoramento, Seleção, Análise e Comunicação de "
    "Operações Suspeitas (Procedimentos MSAC);",
    "Procedimentos Conheça seu Funcionário;",
    "Procedimentos Conheça seu Parceiro;",
    "Procedimentos Conheça seu Prestador de Serviço Terceirizado;",
    "Relatório de Avaliação Interna de Risco",
    "Relatório de Avaliação de Efetividade do ano anterior;",
    "Plano de Ação para correção das deficiências identificadas no Relatório de "
    "Avaliação de Efetividade do ano anterior;",
    "Relatório de Acompanhamento do Plano de Ação;",
]
METHODOLOGY_PROCEDURES = [
    "avaliação da estrutura e dos procedimentos de governança de PLD/FTP;",
    "avaliação do programa de treinamento em PLD/FTP e das ações de promoção da "
    "cultura organizacional de PLD/FTP;",
    "avaliação dos procedimentos MSAC, incluindo a adequação da área de PLD/FTP;",
    "avaliação dos procedimentos relacionados ao cumprimento das disposições da Lei "
    "nº 13.810/19, regulamentados pela Resolução BCB nº 44/20 e Instrução Normativa "
    "BCB nº 262/22;",
    "avaliação dos procedimentos antifraude;",
    "avaliação dos mecanismos de acompanhamento e de controle de que trata o Capítulo "
    "X da Circular BCB nº 3.978/20, incluindo auditoria interna;",
    "realização de testes com o propósito de verificar a aderência dos procedimentos "
    "vigentes em relação ao disposto nos documentos internos, por meio de: entrevistas; "
    "requisição de evidências; amostragem; acompanhamento, por meio de reuniões "
    "remotas, da execução dos procedimentos e controles de PLD/FTP pelos responsáveis "
    "diretos por tal execução; e na análise de relatórios gerenciais e de estatísticas "
    "relativas ao sistema de monitoramento e aos procedimentos conheça seu cliente.",
]
METHODOLOGY_ITEMS_LEAD = "Os itens avaliados do programa de PLD/FTP da Instituição foram:"
METHODOLOGY_CLOSING = [
    "A descrição detalhada da avaliação de cada item, incluindo os testes realizados, "
    "consta no item EXECUÇÃO.",
    "Como resultado dessa avaliação, a deficiência identificada recebeu um grau de "
    "criticidade definido conforme tabela abaixo.",
]
CRITICALITY_CRITERIA = [
    ("ALTA", "Quando a deficiência comprometer de maneira significativa a efetividade "
             "do controle de PLD/FTP associado."),
    ("MÉDIA", "Quando a deficiência corresponder a inobservância de boa prática de "
              "PLD/FTP ou quando a deficiência comprometer parcialmente a efetividade do "
              "controle de PLD/FTP associado."),
    ("BAIXA", "Quando a deficiência não compromete a efetividade do controle de PLD/FTP "
              "associado."),
]
EFFECTIVENESS_CRITERIA_LEAD = (
    "O resultado da avaliação de efetividade resultará na atribuição de um dos "
    "conceitos, mostrados a seguir, ao programa de PLD/FTP da Instituição."
)

# -- 3. Evaluator -------------------------------------------------------------
EVALUATOR_TITLE = "3- Qualificação do Avaliador"

# -- 4. Execution -------------------------------------------------------------
EXECUTION_TITLE = "4- Execução"
EXECUTION_PREFIX = "4"
FINDINGS_TITLE = "Apontamentos"
NO_FINDINGS_TEXT = "Nenhuma deficiência identificada."
ATTACHMENT_GROUPS = [
    ("Requisição", "TEST_REQUISICAO"),
    ("Resposta", "TEST_RESPOSTA"),
    ("Amostra", "TEST_AMOSTRA"),
    ("Evidências", "TEST_EVIDENCIAS"),
]

# -- 5-7 ----------------------------------------------------------------------
CONCLUSION_TITLE = "5- CONCLUSÃO"
CONCLUSION_LEAD = (
    "A tabela abaixo mostra a relação de deficiências e respectiva criticidade "
    "identificadas como resultado da avaliação dos diversos itens do Programa de "
    "PLD/FTP da Instituição."
)
EFFECTIVENESS_TITLE = "Resultado da Avaliação"
ANNEX_TITLE = "6- ANEXO EVIDÊNCIAS"
ANNEX_LEAD = (
    "A tabela abaixo apresenta os itens avaliados e todos os arquivos enviados (norma "
    "e demais anexos) relacionados às questões."
)
