import io
import pandas as pd
from openpyxl.utils import get_column_letter

from .timeline import tick_index, tick_label

EXPORT_COLUMNS = [
    'slot', 'order_no', 'title', 'type', 'customer_name', 'quantity',
    'status', 'assigned_to', 'deadline',
]


def build_timeline_frame(view_model, users_by_id=None):
    """One row per visible cube, placed cubes in tick order and the queue last."""
    users_by_id = users_by_id or {}
    rows = []
    for cube in view_model.filtered_cubes():
        index = tick_index(cube.tick_id)
        user = users_by_id.get(view_model.assignments.get(cube.id))
        rows.append({
            '_sort': index if index is not None else 99,
            'slot': tick_label(index) if index is not None else 'Queue',
            'order_no': cube.order_no,
            'title': cube.title,
            'type': cube.type,
            'customer_name': cube.customer_name or '',
            'quantity': cube.order_data.get('quantity') or 1,
            'status': 'Completed' if cube.completed else 'Pending',
            'assigned_to': user.name if user else '',
            'deadline': cube.deadline.strftime('%Y-%m-%d %H:%M') if cube.deadline else '',
        })

    df = pd.DataFrame(rows, columns=['_sort'] + EXPORT_COLUMNS)
    if df.empty:
        return df.drop(columns=['_sort'])
    return df.sort_values('_sort', kind='stable').drop(columns=['_sort']).reset_index(drop=True)


def timeline_to_xlsx(df, sheet_name):
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
        ws = writer.sheets[sheet_name]
        for i, col in enumerate(df.columns, start=1):
            width = max([len(str(col))] + [len(str(v)) for v in df[col].tolist()])
            ws.column_dimensions[get_column_letter(i)].width = min(width + 2, 50)
    output.seek(0)
    return output
