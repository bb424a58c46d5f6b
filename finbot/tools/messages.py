"""
Reply Text Constants

Every fixed sentence the bot sends lives here so the wording stays
consistent across handlers. Replies are in Portuguese (pt-BR).
"""

import textwrap

# ============================================================================
# ACCESS / ADMIN
# ============================================================================
CHAT_BOUND = (
    "✅ Este chat foi configurado como seu chat principal com o bot. "
    "Agora o bot só responderá às suas mensagens neste chat."
)
CONTACT_ALLOWED = "✅ Contato {contact} adicionado à lista de permitidos."
CONTACT_ALREADY_ALLOWED = "⚠️ Contato já está na lista ou número inválido."
CONTACT_REMOVED = "✅ Contato {contact} removido da lista de permitidos."
CONTACT_NOT_FOUND = "⚠️ Contato não encontrado na lista."

# ============================================================================
# RECORDING
# ============================================================================
EXPENSE_RECORDED = "💸 Gasto registrado: {value} com {category}"
INCOME_RECORDED = "💰 Receita registrada: {value} de {source}"
RECEIPT_SAVED = (
    "📸 Comprovante salvo! Por favor, informe o valor e a categoria usando o comando:\n"
    "*valor comprovante R$XX.XX categoria*"
)
RECEIPT_FAILED = "❌ Erro ao processar o comprovante. Tente novamente."
RECEIPT_UPDATED = "✅ Comprovante atualizado: {value} com {category}"
NO_PENDING_RECEIPT = "❌ Nenhum comprovante recente encontrado para atualizar."
UNDO_DONE = "✅ Último registro excluído: {value} com {category}"
NOTHING_TO_UNDO = "📭 Nenhum gasto registrado para excluir."

# ============================================================================
# CONFIGURATION
# ============================================================================
BUDGET_SET = "✅ Orçamento definido: {value} para {category}"
BUDGET_INVALID = "⚠️ O valor do orçamento deve ser maior que zero."
KEYWORD_ADDED = '✅ Palavra-chave "{keyword}" adicionada à categoria "{category}"'
KEYWORD_EXISTS = '⚠️ Palavra-chave "{keyword}" já existe na categoria "{category}"'
KEYWORD_INVALID = "⚠️ Informe a palavra-chave e a categoria."

# ============================================================================
# QUERIES
# ============================================================================
NO_EXPENSES = "📭 Nenhum gasto registrado ainda."
NO_EXPENSES_FOR_PERIOD = "📭 Nenhum gasto registrado para {period}."
NO_EXPENSES_THIS_MONTH = "📭 Nenhum gasto registrado este mês."
NO_BUDGETS = (
    '📭 Nenhum orçamento definido ainda. Use "definir orçamento para CATEGORIA R$XX" para criar.'
)
NO_INSIGHTS = "📊 Registre mais gastos para receber insights personalizados."

PERIOD_LABELS = {
    "day": "hoje",
    "week": "semana",
    "month": "mês",
    "year": "ano",
}

# ============================================================================
# ERRORS
# ============================================================================
GENERIC_ERROR = "❌ Ocorreu um erro ao processar sua mensagem. Por favor, tente novamente."
SAVE_FAILED_WARNING = "⚠️ Não foi possível salvar os dados. A alteração pode ser perdida ao reiniciar."

# ============================================================================
# HELP
# ============================================================================
HELP_TEXT = textwrap.dedent("""
🤖 *COMANDOS DISPONÍVEIS*

*Registrar Transações:*
- *Gastei R$XX com YYY* → Registra um gasto
- *Recebi R$XX de YYY* → Registra uma receita
- Envie uma foto com a palavra *comprovante* → Registra gasto com comprovante
- *Valor comprovante R$XX categoria* → Define valor e categoria do último comprovante

*Consultas:*
- *Resumo* → Mostra resumo geral
- *Resumo por categoria* → Mostra gastos agrupados por categoria
- *Resumo hoje/semana/mês/ano* → Mostra gastos do período
- *Ranking* → Mostra ranking de gastos por categoria
- *Insights* → Receba dicas personalizadas
- *Orçamentos* → Veja seus orçamentos e limites

*Configurações:*
- *Definir orçamento para CATEGORIA R$XX* → Cria limite de gastos
- *Adicionar PALAVRA à categoria CATEGORIA* → Personaliza categorização
- *Excluir último* → Remove o último registro
- *Configurar chat* → Define este chat como principal
- *Status* → Verifica status do servidor
""").strip()

ADMIN_HELP_TEXT = textwrap.dedent("""
👑 *Comandos de Administração:*
- *Permitir NÚMERO* → Adiciona contato à lista de permitidos
- *Remover NÚMERO* → Remove contato da lista de permitidos
- *Listar permitidos* → Mostra todos os contatos permitidos
""").strip()
