"""
Sample dataset for testing sales-chat-agents.
A small distributor's sales ledger: enough customers, items, stock groups and
months to exercise rankings, comparisons and follow-ups.
"""

SAMPLE_SALES = [
    {"masterid": 1001, "customer": "Acme Traders",   "item": "Steel Rod 8mm",    "category": "Steel",      "region": "North", "amount": 45000,  "quantity": 300, "cp_date": "2024-04-02", "issales": True,  "country": "India"},
    {"masterid": 1001, "customer": "Acme Traders",   "item": "Binding Wire",     "category": "Wire",       "region": "North", "amount": 6000,   "quantity": 120, "cp_date": "2024-04-02", "issales": True,  "country": "India"},
    {"masterid": 1002, "customer": "Zen Foods",      "item": "PVC Pipe 2in",     "category": "Pipes",      "region": "South", "amount": 18500,  "quantity": 150, "cp_date": "2024-04-05", "issales": True,  "country": "India"},
    {"masterid": 1003, "customer": "Shree Builders", "item": "Cement OPC 53",    "category": "Cement",     "region": "West",  "amount": 120000, "quantity": 400, "cp_date": "2024-04-11", "issales": True,  "country": "India"},
    {"masterid": 1004, "customer": "Kiran Hardware", "item": "Binding Wire",     "category": "Wire",       "region": "East",  "amount": 9000,   "quantity": 180, "cp_date": "2024-04-18", "issales": True,  "country": "India"},
    {"masterid": 1005, "customer": "Acme Traders",   "item": "Steel Rod 12mm",   "category": "Steel",      "region": "North", "amount": 78000,  "quantity": 350, "cp_date": "2024-04-26", "issales": True,  "country": "India"},
    {"masterid": 1006, "customer": "Zen Foods",      "item": "PVC Pipe 2in",     "category": "Pipes",      "region": "South", "amount": -3700,  "quantity": -30, "cp_date": "2024-04-29", "issales": False, "country": "India"},
    {"masterid": 1007, "customer": "Shree Builders", "item": "Steel Rod 12mm",   "category": "Steel",      "region": "West",  "amount": 96000,  "quantity": 430, "cp_date": "2024-05-03", "issales": True,  "country": "India"},
    {"masterid": 1007, "customer": "Shree Builders", "item": "Cement OPC 53",    "category": "Cement",     "region": "West",  "amount": 60000,  "quantity": 200, "cp_date": "2024-05-03", "issales": True,  "country": "India"},
    {"masterid": 1008, "customer": "Patel Electricals", "item": "Copper Wire 2.5sq", "category": "Wire",   "region": "West",  "amount": 34000,  "quantity": 40,  "cp_date": "2024-05-09", "issales": True,  "country": "India"},
    {"masterid": 1009, "customer": "Kiran Hardware", "item": "PVC Pipe 4in",     "category": "Pipes",      "region": "East",  "amount": 22000,  "quantity": 90,  "cp_date": "2024-05-14", "issales": True,  "country": "India"},
    {"masterid": 1010, "customer": "Acme Traders",   "item": "Cement OPC 53",    "category": "Cement",     "region": "North", "amount": 54000,  "quantity": 180, "cp_date": "2024-05-21", "issales": True,  "country": "India"},
    {"masterid": 1011, "customer": "Zen Foods",      "item": "Copper Wire 2.5sq", "category": "Wire",      "region": "South", "amount": 17000,  "quantity": 20,  "cp_date": "2024-05-27", "issales": True,  "country": "India"},
    {"masterid": 1012, "customer": "Patel Electricals", "item": "Copper Wire 4sq", "category": "Wire",     "region": "West",  "amount": 51000,  "quantity": 35,  "cp_date": "2024-06-04", "issales": True,  "country": "India"},
    {"masterid": 1013, "customer": "Shree Builders", "item": "Steel Rod 8mm",    "category": "Steel",      "region": "West",  "amount": 67500,  "quantity": 450, "cp_date": "2024-06-12", "issales": True,  "country": "India"},
    {"masterid": 1014, "customer": "Kiran Hardware", "item": "Binding Wire",     "category": "Wire",       "region": "East",  "amount": 7500,   "quantity": 150, "cp_date": "2024-06-19", "issales": True,  "country": "India"},
    {"masterid": 1015, "customer": "Acme Traders",   "item": "PVC Pipe 4in",     "category": "Pipes",      "region": "North", "amount": 26400,  "quantity": 110, "cp_date": "2024-06-28", "issales": True,  "country": "India"},
]

# Dashboard-computed KPIs; optional, SalesDataset computes them when omitted
SAMPLE_METRICS = None
