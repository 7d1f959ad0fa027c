"""Slip labels in the four supported languages."""

from qrslip.schemas.bill import Language


LABELS = {
    Language.DE: {
        "payment_part": "Zahlteil",
        "payable_to": "Konto / Zahlbar an",
        "reference": "Referenz",
        "additional_information": "Zusätzliche Informationen",
        "currency": "Währung",
        "amount": "Betrag",
        "receipt": "Empfangsschein",
        "acceptance_point": "Annahmestelle",
        "payable_by": "Zahlbar durch",
        "payable_by_extended": "Zahlbar durch (Name/Adresse)",
        "payable_by_date": "Zahlbar bis",
    },
    Language.FR: {
        "payment_part": "Section paiement",
        "payable_to": "Compte / Payable à",
        "reference": "Référence",
        "additional_information": "Informations supplémentaires",
        "currency": "Monnaie",
        "amount": "Montant",
        "receipt": "Récépissé",
        "acceptance_point": "Point de dépôt",
        "payable_by": "Payable par",
        "payable_by_extended": "Payable par (nom/adresse)",
        "payable_by_date": "Payable jusqu’au",
    },
    Language.IT: {
        "payment_part": "Sezione pagamento",
        "payable_to": "Conto / Pagabile a",
        "reference": "Riferimento",
        "additional_information": "Informazioni supplementari",
        "currency": "Valuta",
        "amount": "Importo",
        "receipt": "Ricevuta",
        "acceptance_point": "Punto di accettazione",
        "payable_by": "Pagabile da",
        "payable_by_extended": "Pagabile da (nome/indirizzo)",
        "payable_by_date": "Pagabile fino al",
    },
    Language.EN: {
        "payment_part": "Payment part",
        "payable_to": "Account / Payable to",
        "reference": "Reference",
        "additional_information": "Additional information",
        "currency": "Currency",
        "amount": "Amount",
        "receipt": "Receipt",
        "acceptance_point": "Acceptance point",
        "payable_by": "Payable by",
        "payable_by_extended": "Payable by (name/address)",
        "payable_by_date": "Payable by",
    },
}


def labels_for(language: Language | str) -> dict[str, str]:
    return LABELS[Language(language)]
